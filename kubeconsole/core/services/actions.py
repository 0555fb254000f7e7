"""
Action registry — every operation the console offers, as data.

Each handler maps validated params + session to cluster/installer calls
and returns the receipts of the external invocations it made, in order.
Handlers never prompt and never confirm; the dispatcher does both.

Adding an action means adding an ActionDescriptor to ``CATALOG``.
"""

from __future__ import annotations

import logging
from typing import Any

import yaml

from kubeconsole.core.context import SessionState
from kubeconsole.core.errors import InstallError
from kubeconsole.core.models.action import ActionDescriptor, ParamSpec, Receipt
from kubeconsole.core.services import installer
from kubeconsole.core.services.monitor import format_snapshot, resource_snapshot

logger = logging.getLogger(__name__)

SAMPLE_APP_NAME = "hello-node"
SAMPLE_APP_PORT = 8080

DELETABLE_KINDS = (
    "pod",
    "deployment",
    "replicaset",
    "namespace",
    "service",
    "serviceaccount",
    "secret",
    "persistentvolume",
)

ROLE_VERBS = ["get", "list", "watch"]
ROLE_RESOURCES = ["pods"]
PV_HOST_PATH = "/mnt/data"


def _local(output: str) -> Receipt:
    """Receipt for output produced without an external invocation."""
    return Receipt.success([], output=output, metadata={"local": True})


# ── Tools ───────────────────────────────────────────────────────


def _tool(session: SessionState, name: str):
    tool = session.tool(name)
    if tool is None:
        raise InstallError("unknown-tool", f"No recipe for '{name}'")
    return tool


def install_tool(name: str):
    def handler(params: dict[str, Any], session: SessionState) -> list[Receipt]:
        installer.ensure_installed(_tool(session, name), session)
        return []
    handler.__name__ = f"install_{name}"
    return handler


def uninstall_tool(name: str):
    def handler(params: dict[str, Any], session: SessionState) -> list[Receipt]:
        installer.uninstall(_tool(session, name), session)
        return []
    handler.__name__ = f"uninstall_{name}"
    return handler


def update_tools(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    installer.update_tools(session)
    return []


# ── Cluster ─────────────────────────────────────────────────────


def select_driver(session: SessionState) -> str:
    """Root runs minikube without isolation; everyone else gets docker.

    The ``none`` driver avoids needing docker inside the host but runs
    cluster components directly on it.
    """
    return "none" if session.runner.is_root() else "docker"


def start_cluster(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    driver = select_driver(session)
    session.audit.info(f"Using minikube driver: {driver}")
    return [session.runtime.start(driver)]


def deploy_sample_app(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    created = session.runtime.create_deployment(SAMPLE_APP_NAME, session.config.sample_image)
    if created.failed:
        return [created]
    exposed = session.runtime.expose(SAMPLE_APP_NAME, port=SAMPLE_APP_PORT, type="LoadBalancer")
    return [created, exposed]


def cluster_info(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.cluster_info()]


def list_pods(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.get("pods")]


def list_services(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.get("services")]


def monitor_resources(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [_local(format_snapshot(resource_snapshot()))]


# ── Workloads ───────────────────────────────────────────────────


def create_pod(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.run_pod(params["name"], params["image"])]


def create_replicated_workload(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.create_deployment(params["name"], params["image"], replicas=params["replicas"])]


def scale_workload(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.scale(params["name"], params["replicas"])]


def view_logs(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.logs(params["pod"], params.get("namespace"))]


def delete_resource(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.delete(params["kind"], params["name"])]


# ── Namespaces / RBAC / secrets / volumes / accounts ────────────


def create_namespace(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.create_namespace(params["namespace"])]


def delete_namespace(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.delete("namespace", params["namespace"])]


def create_role(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.create_role(
        params["role"], params["namespace"], verbs=ROLE_VERBS, resources=ROLE_RESOURCES,
    )]


def create_rolebinding(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.create_rolebinding(
        params["binding"], params["role"], params["service_account"], params["namespace"],
    )]


def split_literals(raw: str) -> list[str]:
    """Split the comma-separated key=value input into literals.

    Pair syntax is not checked; kubectl rejects malformed literals.
    """
    return [part.strip() for part in raw.split(",") if part.strip()]


def create_secret(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.create_secret(
        params["secret"], params["namespace"], split_literals(params["literals"]),
    )]


def view_secret(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.get("secret", params["secret"], namespace=params["namespace"], output="yaml")]


def persistent_volume_manifest(name: str, capacity: str, host_path: str = PV_HOST_PATH) -> str:
    """Render a hostPath PersistentVolume manifest."""
    manifest = {
        "apiVersion": "v1",
        "kind": "PersistentVolume",
        "metadata": {"name": name},
        "spec": {
            "capacity": {"storage": capacity},
            "accessModes": ["ReadWriteOnce"],
            "hostPath": {"path": host_path},
        },
    }
    return yaml.safe_dump(manifest, sort_keys=False)


def create_volume(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.apply_manifest(persistent_volume_manifest(params["volume"], params["capacity"]))]


def delete_volume(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.delete("pv", params["volume"])]


def create_service_account(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.create_service_account(params["account"], params["namespace"])]


def delete_service_account(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [session.runtime.delete("serviceaccount", params["account"], params["namespace"])]


def show_help(params: dict[str, Any], session: SessionState) -> list[Receipt]:
    return [_local(help_text())]


# ── Catalog ─────────────────────────────────────────────────────

_NAMESPACE = ParamSpec(name="namespace", prompt="Enter namespace")

CATALOG: tuple[ActionDescriptor, ...] = (
    ActionDescriptor(
        key="1", label="Install curl", destructive=True,
        help="Installs the curl command-line tool.",
        handler=install_tool("curl"),
    ),
    ActionDescriptor(
        key="2", label="Install kubectl", destructive=True,
        help="Installs the Kubernetes command-line tool.",
        handler=install_tool("kubectl"),
    ),
    ActionDescriptor(
        key="3", label="Install minikube", destructive=True,
        help="Installs the Minikube tool for running Kubernetes locally.",
        handler=install_tool("minikube"),
    ),
    ActionDescriptor(
        key="4", label="Start minikube", destructive=True,
        help="Starts the Minikube cluster.",
        handler=start_cluster, done="Minikube started successfully.",
    ),
    ActionDescriptor(
        key="5", label="Deploy sample app", destructive=True,
        help="Deploys a sample application to the Minikube cluster.",
        handler=deploy_sample_app, done="Sample application deployed successfully.",
    ),
    ActionDescriptor(
        key="6", label="Uninstall kubectl", destructive=True,
        help="Removes the kubectl tool.",
        handler=uninstall_tool("kubectl"),
    ),
    ActionDescriptor(
        key="7", label="Uninstall minikube", destructive=True,
        help="Removes the Minikube tool.",
        handler=uninstall_tool("minikube"),
    ),
    ActionDescriptor(
        key="8", label="Monitor resources",
        help="Displays current CPU, memory, and disk usage.",
        handler=monitor_resources,
    ),
    ActionDescriptor(
        key="9", label="Create a pod", destructive=True,
        help="Creates a single pod from an image.",
        params=(
            ParamSpec(name="name", prompt="Enter pod name", default="my-pod"),
            ParamSpec(name="image", prompt="Enter image", default="nginx"),
        ),
        handler=create_pod, done="Pod {name} created successfully.",
    ),
    ActionDescriptor(
        key="10", label="Create a replicaset", destructive=True,
        help="Creates a deployment with the given number of replicas.",
        params=(
            ParamSpec(name="name", prompt="Enter deployment name", default="my-replicaset"),
            ParamSpec(name="image", prompt="Enter image", default="nginx"),
            ParamSpec(name="replicas", prompt="Enter number of replicas", kind="positive_int", default="3"),
        ),
        handler=create_replicated_workload,
        done="Deployment {name} created with {replicas} replicas.",
    ),
    ActionDescriptor(
        key="11", label="Scale a deployment", destructive=True,
        help="Scales a deployment to a specified number of replicas.",
        params=(
            ParamSpec(name="name", prompt="Enter deployment name"),
            ParamSpec(name="replicas", prompt="Enter number of replicas", kind="non_negative_int"),
        ),
        handler=scale_workload, done="Deployment {name} scaled to {replicas} replicas.",
    ),
    ActionDescriptor(
        key="12", label="View pod logs",
        help="Displays logs for a specified pod.",
        params=(
            ParamSpec(name="pod", prompt="Enter pod name"),
            ParamSpec(name="namespace", prompt="Enter namespace (blank for current)", required=False),
        ),
        handler=view_logs,
    ),
    ActionDescriptor(
        key="13", label="Delete a resource", destructive=True,
        help="Deletes a specified Kubernetes resource.",
        params=(
            ParamSpec(name="kind", prompt="Enter resource type", kind="choice", choices=DELETABLE_KINDS),
            ParamSpec(name="name", prompt="Enter resource name"),
        ),
        handler=delete_resource, done="{kind} {name} deleted successfully.",
    ),
    ActionDescriptor(
        key="14", label="Get cluster info",
        help="Displays information about the Kubernetes cluster.",
        handler=cluster_info,
    ),
    ActionDescriptor(
        key="15", label="List all pods",
        help="Lists all pods in the current namespace.",
        handler=list_pods,
    ),
    ActionDescriptor(
        key="16", label="List all services",
        help="Lists all services in the current namespace.",
        handler=list_services,
    ),
    ActionDescriptor(
        key="17", label="Manage namespaces",
        help="Create or delete namespaces.",
        submenu=(
            ActionDescriptor(
                key="1", label="Create a namespace", destructive=True,
                params=(ParamSpec(name="namespace", prompt="Enter namespace name"),),
                handler=create_namespace, done="Namespace {namespace} created successfully.",
            ),
            ActionDescriptor(
                key="2", label="Delete a namespace", destructive=True,
                params=(ParamSpec(name="namespace", prompt="Enter namespace name"),),
                handler=delete_namespace, done="Namespace {namespace} deleted successfully.",
            ),
        ),
    ),
    ActionDescriptor(
        key="18", label="Update tools", destructive=True,
        help="Updates kubectl and minikube to the latest versions.",
        handler=update_tools,
    ),
    ActionDescriptor(
        key="19", label="Manage RBAC",
        help="Create roles and role bindings.",
        submenu=(
            ActionDescriptor(
                key="1", label="Create a role", destructive=True,
                params=(ParamSpec(name="role", prompt="Enter role name"), _NAMESPACE),
                handler=create_role,
                done="Role {role} created successfully in namespace {namespace}.",
            ),
            ActionDescriptor(
                key="2", label="Create a role binding", destructive=True,
                params=(
                    ParamSpec(name="binding", prompt="Enter role binding name"),
                    ParamSpec(name="role", prompt="Enter role name"),
                    ParamSpec(name="service_account", prompt="Enter service account name"),
                    _NAMESPACE,
                ),
                handler=create_rolebinding,
                done="Role binding {binding} created successfully in namespace {namespace}.",
            ),
        ),
    ),
    ActionDescriptor(
        key="20", label="Manage secrets",
        help="Create and view secrets.",
        submenu=(
            ActionDescriptor(
                key="1", label="Create a secret", destructive=True,
                params=(
                    ParamSpec(name="secret", prompt="Enter secret name"),
                    _NAMESPACE,
                    ParamSpec(name="literals", prompt="Enter key=value pairs (comma-separated)"),
                ),
                handler=create_secret,
                done="Secret {secret} created successfully in namespace {namespace}.",
            ),
            ActionDescriptor(
                key="2", label="View a secret", sensitive=True,
                params=(ParamSpec(name="secret", prompt="Enter secret name"), _NAMESPACE),
                handler=view_secret,
            ),
        ),
    ),
    ActionDescriptor(
        key="21", label="Manage persistent volumes",
        help="Create or delete persistent volumes.",
        submenu=(
            ActionDescriptor(
                key="1", label="Create a persistent volume", destructive=True,
                params=(
                    ParamSpec(name="volume", prompt="Enter persistent volume name"),
                    ParamSpec(name="capacity", prompt="Enter storage size (e.g., 1Gi)"),
                ),
                handler=create_volume, done="Persistent volume {volume} created successfully.",
            ),
            ActionDescriptor(
                key="2", label="Delete a persistent volume", destructive=True,
                params=(ParamSpec(name="volume", prompt="Enter persistent volume name"),),
                handler=delete_volume, done="Persistent volume {volume} deleted successfully.",
            ),
        ),
    ),
    ActionDescriptor(
        key="22", label="Manage service accounts",
        help="Create or delete service accounts.",
        submenu=(
            ActionDescriptor(
                key="1", label="Create a service account", destructive=True,
                params=(ParamSpec(name="account", prompt="Enter service account name"), _NAMESPACE),
                handler=create_service_account,
                done="Service account {account} created successfully in namespace {namespace}.",
            ),
            ActionDescriptor(
                key="2", label="Delete a service account", destructive=True,
                params=(ParamSpec(name="account", prompt="Enter service account name"), _NAMESPACE),
                handler=delete_service_account,
                done="Service account {account} deleted successfully from namespace {namespace}.",
            ),
        ),
    ),
    ActionDescriptor(
        key="23", label="Help",
        help="Displays this help message.",
        handler=show_help,
    ),
    ActionDescriptor(
        key="24", label="Exit", exit=True,
        help="Exits the console.",
    ),
)


def find(key: str, catalog: tuple[ActionDescriptor, ...] = CATALOG) -> ActionDescriptor | None:
    """Look up a top-level entry by its selector."""
    key = key.strip()
    for entry in catalog:
        if entry.key == key:
            return entry
    return None


def iter_actions(catalog: tuple[ActionDescriptor, ...] = CATALOG):
    """Yield every executable entry, submenu children included."""
    for entry in catalog:
        if entry.is_submenu:
            yield from entry.submenu
        elif not entry.exit:
            yield entry


def help_text(catalog: tuple[ActionDescriptor, ...] = CATALOG) -> str:
    lines = ["Help:"]
    for entry in catalog:
        lines.append(f"{entry.key}) {entry.label} - {entry.help}")
    return "\n".join(lines)
