"""
Share Broker Service Launcher

Starts the broker API from the broker/ package.

This service provides:
- Service catalog (one shared-filesystem service, one free plan)
- Service instance provisioning and deprovisioning
- Service binding issuance, lookup and revocation
- Durable instance/binding snapshots (JSON files or SQL table)

Usage:
    python scripts/run_broker_service.py --host 0.0.0.0 --port 8080 --data-dir ./data

Environment Variables:
    SHAREBROKER_API_PORT: Broker API port (default: 8080)
    SHAREBROKER_BIND_HOST: Bind address (default: 0.0.0.0)
    SHAREBROKER_DATA_DIR: Directory for persisted state (default: ./data)
    SHAREBROKER_PERSISTENCE: 'file' or 'sql' (default: file)
    SHAREBROKER_STORAGE_ROOT: Root directory for shares (default: ./share_storage)
"""
import argparse
import os
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(description="Run share broker service")
    parser.add_argument("--host", default=os.getenv("SHAREBROKER_BIND_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("SHAREBROKER_API_PORT", "8080")))
    parser.add_argument("--data-dir", default=os.getenv("SHAREBROKER_DATA_DIR", "./data"))
    parser.add_argument("--persistence", choices=["file", "sql"], default=os.getenv("SHAREBROKER_PERSISTENCE", "file"))
    parser.add_argument("--storage-root", default=os.getenv("SHAREBROKER_STORAGE_ROOT", "./share_storage"))
    args = parser.parse_args()

    print("=" * 60)
    print("Share Broker Service")
    print("=" * 60)
    print(f"API Address: {args.host}:{args.port}")
    print(f"Persisted state: {args.data_dir} ({args.persistence})")
    print(f"Share storage: {args.storage_root}")
    print("=" * 60)

    # Set environment variables for service startup
    os.environ["SHAREBROKER_API_PORT"] = str(args.port)
    os.environ["SHAREBROKER_BIND_HOST"] = args.host
    os.environ["SHAREBROKER_DATA_DIR"] = args.data_dir
    os.environ["SHAREBROKER_PERSISTENCE"] = args.persistence
    os.environ["SHAREBROKER_STORAGE_ROOT"] = args.storage_root

    uvicorn.run("broker.service:app", host=args.host, port=args.port, reload=False)


if __name__ == "__main__":
    main()
