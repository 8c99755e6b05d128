from broker.models import Catalog, Service, ServicePlan

SERVICE_ID = "cephfs-service-guid"
PLAN_ID = "free-plan-guid"


def get_catalog() -> Catalog:
    """Static catalog: one bindable shared-filesystem service with a single free plan."""
    plan = ServicePlan(
        id=PLAN_ID,
        name="free",
        description="free ceph filesystem",
        free=True,
    )
    service = Service(
        id=SERVICE_ID,
        name="cephfs",
        description="Provides the Ceph FS volume service, including volume creation and volume mounts",
        bindable=True,
        plan_updateable=False,
        tags=["ceph"],
        requires=["volume_mount"],
        plans=[plan],
    )
    return Catalog(services=[service])
