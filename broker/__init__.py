"""
Share Broker — storage service broker core

Tracks provisioned storage shares (service instances) and the mount grants
issued against them (service bindings).
Responsibilities:
- Static service catalog
- Instance provisioning and deprovisioning on the share backend
- Binding issuance with container mount-path resolution
- Durable snapshots of instance and binding state
"""
