"""
End-to-end smoke run against a live share broker.

Walks the full lifecycle: catalog, provision, replayed provision, bind,
binding lookup, unbind, deprovision.

Usage:
    python scripts/smoke_broker.py --base-url http://127.0.0.1:8080
"""
import argparse
import json
import sys
import time
from typing import Any

import requests


class SmokeError(RuntimeError):
    pass


def req(base_url: str, method: str, path: str, **kwargs: Any) -> requests.Response:
    url = f"{base_url.rstrip('/')}{path}"
    return requests.request(method, url, timeout=20, **kwargs)


def req_json(base_url: str, method: str, path: str, expected: tuple[int, ...] = (200,), **kwargs: Any) -> dict[str, Any]:
    response = req(base_url, method, path, **kwargs)
    try:
        payload = response.json()
    except Exception as exc:
        raise SmokeError(f"{method} {path} returned non-JSON body: {response.text[:300]}") from exc

    if response.status_code not in expected:
        raise SmokeError(
            f"{method} {path} failed with HTTP {response.status_code}: {json.dumps(payload, default=str)}"
        )
    return payload


def run_smoke(base_url: str) -> dict[str, Any]:
    ts = str(int(time.time()))
    instance_id = f"smoke-instance-{ts}"
    binding_id = f"smoke-binding-{ts}"
    report: dict[str, Any] = {"base_url": base_url, "instance_id": instance_id, "binding_id": binding_id}

    catalog = req_json(base_url, "GET", "/v2/catalog")
    service = catalog["services"][0]
    plan = service["plans"][0]
    report["service"] = service["name"]

    provision_body = {
        "service_id": service["id"],
        "plan_id": plan["id"],
        "organization_guid": "smoke-org",
        "space_guid": "smoke-space",
        "parameters": {},
    }
    created = req_json(base_url, "PUT", f"/v2/service_instances/{instance_id}", expected=(201,), json=provision_body)
    report["last_operation"] = created.get("last_operation")

    req_json(base_url, "PUT", f"/v2/service_instances/{instance_id}", expected=(200,), json=provision_body)

    bind_body = {
        "service_id": service["id"],
        "plan_id": plan["id"],
        "app_guid": "smoke-app",
        "parameters": {"path": "/data"},
    }
    bound = req_json(
        base_url,
        "PUT",
        f"/v2/service_instances/{instance_id}/service_bindings/{binding_id}",
        expected=(201,),
        json=bind_body,
    )
    container_path = bound["volume_mounts"][0]["container_path"]
    if container_path != "/data":
        raise SmokeError(f"unexpected container path {container_path}")
    report["container_path"] = container_path

    req_json(base_url, "GET", f"/v2/service_instances/{instance_id}/service_bindings/{binding_id}")
    req_json(base_url, "DELETE", f"/v2/service_instances/{instance_id}/service_bindings/{binding_id}")
    req_json(
        base_url,
        "GET",
        f"/v2/service_instances/{instance_id}/service_bindings/{binding_id}",
        expected=(404,),
    )
    req_json(base_url, "DELETE", f"/v2/service_instances/{instance_id}")
    req_json(base_url, "DELETE", f"/v2/service_instances/{instance_id}", expected=(410,))

    report["status"] = "ok"
    return report


def main() -> int:
    parser = argparse.ArgumentParser(description="Smoke-test a running share broker")
    parser.add_argument("--base-url", default="http://127.0.0.1:8080")
    args = parser.parse_args()

    try:
        report = run_smoke(args.base_url)
    except (SmokeError, requests.RequestException) as exc:
        print(f"SMOKE FAILED: {exc}")
        return 1

    print(json.dumps(report, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
