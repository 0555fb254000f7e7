"""
kubectl / minikube cluster runtime.

Translates logical cluster operations into ``kubectl`` and ``minikube``
argv lists and runs them through a Runner.  Output is never parsed here;
list/info calls hand the tool's raw output back in the receipt.
"""

from __future__ import annotations

import logging

from kubeconsole.adapters.base import ClusterRuntime, Runner
from kubeconsole.core.models.action import Receipt

logger = logging.getLogger(__name__)


class KubectlRuntime(ClusterRuntime):
    """ClusterRuntime backed by the kubectl and minikube CLIs."""

    def __init__(self, runner: Runner, *, kubectl: str = "kubectl", minikube: str = "minikube"):
        self._runner = runner
        self._kubectl = kubectl
        self._minikube = minikube

    def _k(self, *args: str, input: str | None = None) -> Receipt:
        return self._runner.run([self._kubectl, *args], input=input)

    @staticmethod
    def _ns(namespace: str | None) -> list[str]:
        return ["-n", namespace] if namespace else []

    # ── Cluster ─────────────────────────────────────────────────

    def start(self, driver: str) -> Receipt:
        return self._runner.run([self._minikube, "start", f"--driver={driver}"])

    def cluster_info(self) -> Receipt:
        return self._k("cluster-info")

    # ── Workloads ───────────────────────────────────────────────

    def run_pod(self, name: str, image: str) -> Receipt:
        return self._k("run", name, f"--image={image}", "--restart=Never")

    def create_deployment(self, name: str, image: str, replicas: int | None = None) -> Receipt:
        args = ["create", "deployment", name, f"--image={image}"]
        if replicas is not None:
            args.append(f"--replicas={replicas}")
        return self._k(*args)

    def expose(self, name: str, *, port: int, type: str = "LoadBalancer") -> Receipt:
        return self._k("expose", "deployment", name, f"--type={type}", f"--port={port}")

    def scale(self, name: str, replicas: int, kind: str = "deployment") -> Receipt:
        return self._k("scale", kind, name, f"--replicas={replicas}")

    def delete(self, kind: str, name: str, namespace: str | None = None) -> Receipt:
        return self._k("delete", kind, name, *self._ns(namespace))

    def get(self, kind: str, name: str | None = None, *,
            namespace: str | None = None, output: str | None = None) -> Receipt:
        args = ["get", kind]
        if name:
            args.append(name)
        args.extend(self._ns(namespace))
        if output:
            args.extend(["-o", output])
        return self._k(*args)

    def logs(self, pod: str, namespace: str | None = None) -> Receipt:
        return self._k("logs", pod, *self._ns(namespace))

    # ── Namespaces / RBAC / secrets / accounts ──────────────────

    def create_namespace(self, name: str) -> Receipt:
        return self._k("create", "namespace", name)

    def create_role(self, name: str, namespace: str, *,
                    verbs: list[str], resources: list[str]) -> Receipt:
        return self._k(
            "create", "role", name,
            f"--verb={','.join(verbs)}",
            f"--resource={','.join(resources)}",
            "-n", namespace,
        )

    def create_rolebinding(self, name: str, role: str, service_account: str,
                           namespace: str) -> Receipt:
        return self._k(
            "create", "rolebinding", name,
            f"--role={role}",
            f"--serviceaccount={namespace}:{service_account}",
            "-n", namespace,
        )

    def create_secret(self, name: str, namespace: str, literals: list[str]) -> Receipt:
        args = ["create", "secret", "generic", name, "-n", namespace]
        args.extend(f"--from-literal={literal}" for literal in literals)
        return self._k(*args)

    def create_service_account(self, name: str, namespace: str) -> Receipt:
        return self._k("create", "serviceaccount", name, "-n", namespace)

    def apply_manifest(self, manifest: str) -> Receipt:
        return self._k("apply", "-f", "-", input=manifest)
