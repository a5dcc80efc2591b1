"""Kubernetes object templates for the per-pool NGINX ingress stacks.

Each template is a builder function returning the JSON resource of one
object. `render_manifest` looks a builder up by its template name and fills
it in from a substitution mapping; `parse_manifest` turns the result into a
`Manifest`, tagged with the `ObjectKind` that decides which API calls the
`~nodepoolingressoperator.k8s.ClusterClient` makes for it.
"""

from __future__ import annotations

__all__ = (
    "CONTROLLER_CLUSTER_ROLE",
    "CONTROLLER_CLUSTER_ROLE_BINDING",
    "CONTROLLER_CONFIG_MAP",
    "CONTROLLER_DEPLOYMENT",
    "CONTROLLER_ROLE",
    "CONTROLLER_ROLE_BINDING",
    "CONTROLLER_SERVICE",
    "CONTROLLER_SERVICE_ACCOUNT",
    "TEMPLATES",
    "VALIDATING_WEBHOOK_CONFIGURATION",
    "WEBHOOK_CLUSTER_ROLE",
    "WEBHOOK_CLUSTER_ROLE_BINDING",
    "WEBHOOK_DEPLOYMENT",
    "WEBHOOK_JOB",
    "WEBHOOK_JOB_PATCH",
    "WEBHOOK_ROLE",
    "WEBHOOK_ROLE_BINDING",
    "WEBHOOK_SERVICE",
    "WEBHOOK_SERVICE_ACCOUNT",
    "Manifest",
    "ObjectKind",
    "create_namespace",
    "parse_manifest",
    "render_manifest",
)

import copy
import enum
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from nodepoolingressoperator.errors import ManifestError
from nodepoolingressoperator.ingress import NGINX_INGRESS_CONTROLLER_VERSION

CONTROLLER_CLUSTER_ROLE = "controller-clusterrole"
WEBHOOK_CLUSTER_ROLE = "webhook-clusterrole"
CONTROLLER_SERVICE_ACCOUNT = "controller-serviceaccount"
CONTROLLER_CONFIG_MAP = "controller-configmap"
CONTROLLER_CLUSTER_ROLE_BINDING = "controller-clusterrolebinding"
CONTROLLER_ROLE = "controller-role"
CONTROLLER_ROLE_BINDING = "controller-rolebinding"
CONTROLLER_SERVICE = "controller-service"
CONTROLLER_DEPLOYMENT = "controller-deployment"
WEBHOOK_SERVICE_ACCOUNT = "webhook-serviceaccount"
WEBHOOK_CLUSTER_ROLE_BINDING = "webhook-clusterrolebinding"
WEBHOOK_ROLE = "webhook-role"
WEBHOOK_ROLE_BINDING = "webhook-rolebinding"
WEBHOOK_SERVICE = "webhook-service"
VALIDATING_WEBHOOK_CONFIGURATION = "validating-webhook-configuration"
WEBHOOK_JOB = "webhook-job-create"
WEBHOOK_JOB_PATCH = "webhook-job-patch"
WEBHOOK_DEPLOYMENT = "webhook-deployment"

CHART = "ingress-nginx-3.34.0"
CONTROLLER_IMAGE = (
    "k8s.gcr.io/ingress-nginx/controller:v0.48.1"
    "@sha256:e9fb216ace49dfa4a5983b183067e97496e7a8b307d2093f4278cd550c303899"
)
CERTGEN_IMAGE = "docker.io/jettech/kube-webhook-certgen:v1.5.1"

CONTROLLER_NAME = "ingress-nginx"
ADMISSION_NAME = "ingress-nginx-admission"
CONTROLLER_SERVICE_NAME = "ingress-nginx-controller"
ADMISSION_SERVICE_NAME = "ingress-nginx-controller-admission"

HELM_HOOK_ANNOTATIONS = {
    "helm.sh/hook": "pre-install,pre-upgrade,post-install,post-upgrade",
    "helm.sh/hook-delete-policy": "before-hook-creation,hook-succeeded",
}

SELECTOR_LABELS = {
    "app.kubernetes.io/name": "ingress-nginx",
    "app.kubernetes.io/instance": "ingress-nginx",
    "app.kubernetes.io/component": "controller",
}


class ObjectKind(enum.Enum):
    """Kinds of Kubernetes objects the operator manages.

    The value is the ``kind`` field of the object.
    """

    NAMESPACE = "Namespace"
    SERVICE_ACCOUNT = "ServiceAccount"
    CONFIG_MAP = "ConfigMap"
    SERVICE = "Service"
    ROLE = "Role"
    ROLE_BINDING = "RoleBinding"
    CLUSTER_ROLE = "ClusterRole"
    CLUSTER_ROLE_BINDING = "ClusterRoleBinding"
    DEPLOYMENT = "Deployment"
    JOB = "Job"
    VALIDATING_WEBHOOK_CONFIGURATION = "ValidatingWebhookConfiguration"

    @property
    def namespaced(self) -> bool:
        return self not in _CLUSTER_SCOPED


_CLUSTER_SCOPED = frozenset(
    {
        ObjectKind.NAMESPACE,
        ObjectKind.CLUSTER_ROLE,
        ObjectKind.CLUSTER_ROLE_BINDING,
        ObjectKind.VALIDATING_WEBHOOK_CONFIGURATION,
    }
)


@dataclass(frozen=True)
class Manifest:
    """A rendered Kubernetes object, tagged with its kind."""

    kind: ObjectKind
    body: dict[str, Any]

    @property
    def name(self) -> str:
        return self.body["metadata"]["name"]

    @property
    def namespace(self) -> str | None:
        if not self.kind.namespaced:
            return None
        return self.body["metadata"].get("namespace")

    def __str__(self) -> str:
        return f"{self.kind.value.lower()}/{self.name}"

    def named(self, name: str) -> Manifest:
        """Return a copy renamed to ``name``."""
        body = copy.deepcopy(self.body)
        body["metadata"]["name"] = name
        return Manifest(kind=self.kind, body=body)

    def in_namespace(self, namespace: str) -> Manifest:
        """Return a copy placed into ``namespace``.

        Namespaced objects get ``metadata.namespace``; bindings get the
        namespace of their service account subject and webhook
        configurations the namespace of their backing service.
        """
        body = copy.deepcopy(self.body)
        if self.kind.namespaced:
            body["metadata"]["namespace"] = namespace
        if self.kind in (
            ObjectKind.ROLE_BINDING,
            ObjectKind.CLUSTER_ROLE_BINDING,
        ):
            body["subjects"][0]["namespace"] = namespace
        elif self.kind is ObjectKind.VALIDATING_WEBHOOK_CONFIGURATION:
            service = body["webhooks"][0]["clientConfig"]["service"]
            service["namespace"] = namespace
        return Manifest(kind=self.kind, body=body)


def parse_manifest(body: dict[str, Any]) -> Manifest:
    """Tag a JSON resource with its `ObjectKind`.

    Raises
    ------
    ManifestError
        Raised if the resource has no name or is of a kind the operator does
        not manage.
    """
    try:
        kind = ObjectKind(body["kind"])
    except (KeyError, ValueError) as err:
        raise ManifestError(
            f"unsupported object kind {body.get('kind')!r}"
        ) from err
    if not body.get("metadata", {}).get("name"):
        raise ManifestError(f"{kind.value} manifest has no metadata.name")
    return Manifest(kind=kind, body=body)


def render_manifest(
    template: str, substitutions: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Render the named template into a JSON resource.

    Parameters
    ----------
    template : `str`
        One of the template name constants of this module, such as
        `CONTROLLER_DEPLOYMENT`.
    substitutions : `dict`, optional
        Template values. Deployments and the controller role need
        ``nodepool_name``; the webhook patch job needs ``webhook_name``.
        Missing values render as empty strings.

    Returns
    -------
    resource : `dict`
        The rendered object.
    """
    try:
        builder = TEMPLATES[template]
    except KeyError as err:
        raise ManifestError(f"unknown template {template!r}") from err
    return builder(_Substitutions(substitutions or {}))


class _Substitutions(dict):
    def __init__(self, values: Mapping[str, str]) -> None:
        super().__init__(values)

    def __missing__(self, key: str) -> str:
        return ""


def create_namespace(*, name: str) -> dict[str, Any]:
    """Create the JSON resource for a node pool namespace."""
    return {
        "apiVersion": "v1",
        "kind": "Namespace",
        "metadata": {"name": name},
    }


def _labels(component: str | None = None) -> dict[str, str]:
    labels = {
        "helm.sh/chart": CHART,
        "app.kubernetes.io/name": "ingress-nginx",
        "app.kubernetes.io/instance": "ingress-nginx",
        "app.kubernetes.io/version": NGINX_INGRESS_CONTROLLER_VERSION,
        "app.kubernetes.io/managed-by": "Helm",
    }
    if component is not None:
        labels["app.kubernetes.io/component"] = component
    return labels


def _rule(
    api_groups: list[str],
    resources: list[str],
    verbs: list[str],
    resource_names: list[str] | None = None,
) -> dict[str, Any]:
    rule: dict[str, Any] = {
        "apiGroups": api_groups,
        "resources": resources,
        "verbs": verbs,
    }
    if resource_names:
        rule["resourceNames"] = resource_names
    return rule


def create_controller_cluster_role() -> dict[str, Any]:
    """Create the ClusterRole shared by all ingress controllers."""
    ingress_groups = ["extensions", "networking.k8s.io"]
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "ClusterRole",
        "metadata": {"name": CONTROLLER_NAME, "labels": _labels()},
        "rules": [
            _rule(
                [""],
                ["configmaps", "endpoints", "nodes", "pods", "secrets"],
                ["list", "watch"],
            ),
            _rule([""], ["nodes"], ["get"]),
            _rule([""], ["services"], ["get", "list", "watch"]),
            _rule(ingress_groups, ["ingresses"], ["get", "list", "watch"]),
            _rule([""], ["events"], ["create", "patch"]),
            _rule(ingress_groups, ["ingresses/status"], ["update"]),
            _rule(
                ["networking.k8s.io"],
                ["ingressclasses"],
                ["get", "list", "watch"],
            ),
        ],
    }


def create_webhook_cluster_role() -> dict[str, Any]:
    """Create the ClusterRole shared by the admission certificate jobs."""
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "ClusterRole",
        "metadata": {
            "name": ADMISSION_NAME,
            "annotations": dict(HELM_HOOK_ANNOTATIONS),
            "labels": _labels("admission-webhook"),
        },
        "rules": [
            _rule(
                ["admissionregistration.k8s.io"],
                ["validatingwebhookconfigurations"],
                ["get", "update"],
            )
        ],
    }


def create_controller_service_account() -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "ServiceAccount",
        "metadata": {"name": CONTROLLER_NAME, "labels": _labels("controller")},
        "automountServiceAccountToken": True,
    }


def create_controller_config_map() -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {
            "name": CONTROLLER_SERVICE_NAME,
            "labels": _labels("controller"),
        },
    }


def create_cluster_role_binding(
    *, role_name: str, service_account: str, component: str | None = None
) -> dict[str, Any]:
    """Create a ClusterRoleBinding granting ``role_name`` to a service
    account.

    The binding is cluster-scoped but belongs to a single pool, so the
    caller renames it and sets the subject namespace (see
    `Manifest.named` and `Manifest.in_namespace`).
    """
    metadata: dict[str, Any] = {
        "name": role_name,
        "labels": _labels(component),
    }
    if component == "admission-webhook":
        metadata["annotations"] = dict(HELM_HOOK_ANNOTATIONS)
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "ClusterRoleBinding",
        "metadata": metadata,
        "roleRef": {
            "apiGroup": "rbac.authorization.k8s.io",
            "kind": "ClusterRole",
            "name": role_name,
        },
        "subjects": [{"kind": "ServiceAccount", "name": service_account}],
    }


def create_controller_role(*, pool: str) -> dict[str, Any]:
    """Create the Role of the ingress controller of ``pool``.

    The role grants access to the leader election config maps, whose names
    embed the pool name.
    """
    ingress_groups = ["extensions", "networking.k8s.io"]
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "Role",
        "metadata": {"name": CONTROLLER_NAME, "labels": _labels("controller")},
        "rules": [
            _rule([""], ["namespaces"], ["get"]),
            _rule(
                [""],
                ["configmaps", "pods", "secrets", "endpoints"],
                ["get", "list", "watch"],
            ),
            _rule([""], ["services"], ["get", "list", "watch"]),
            _rule(ingress_groups, ["ingresses"], ["get", "list", "watch"]),
            _rule(ingress_groups, ["ingresses/status"], ["update"]),
            _rule(
                ["networking.k8s.io"],
                ["ingressclasses"],
                ["get", "list", "watch"],
            ),
            _rule(
                [""],
                ["configmaps"],
                ["get", "update"],
                resource_names=[
                    f"ingress-controller-leader-edge-{pool}",
                    f"ingress-controller-leader-cloud-{pool}",
                ],
            ),
            _rule([""], ["configmaps"], ["create"]),
            _rule([""], ["events"], ["create", "patch"]),
        ],
    }


def create_role_binding(
    *, name: str, component: str
) -> dict[str, Any]:
    """Create a RoleBinding of the Role and ServiceAccount named ``name``."""
    metadata: dict[str, Any] = {"name": name, "labels": _labels(component)}
    if component == "admission-webhook":
        metadata["annotations"] = dict(HELM_HOOK_ANNOTATIONS)
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "RoleBinding",
        "metadata": metadata,
        "roleRef": {
            "apiGroup": "rbac.authorization.k8s.io",
            "kind": "Role",
            "name": name,
        },
        "subjects": [{"kind": "ServiceAccount", "name": name}],
    }


def create_controller_service() -> dict[str, Any]:
    """Create the NodePort Service exposing a pool's ingress controller."""
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {
            "name": CONTROLLER_SERVICE_NAME,
            "labels": _labels("controller"),
        },
        "spec": {
            "type": "NodePort",
            "ports": [
                {
                    "name": "http",
                    "port": 80,
                    "protocol": "TCP",
                    "targetPort": "http",
                },
                {
                    "name": "https",
                    "port": 443,
                    "protocol": "TCP",
                    "targetPort": "https",
                },
            ],
            "selector": dict(SELECTOR_LABELS),
        },
    }


def create_webhook_service() -> dict[str, Any]:
    """Create the Service in front of the admission webhook deployment."""
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {
            "name": ADMISSION_SERVICE_NAME,
            "labels": _labels("controller"),
        },
        "spec": {
            "type": "ClusterIP",
            "ports": [
                {"name": "https-webhook", "port": 443, "targetPort": "webhook"}
            ],
            "selector": dict(SELECTOR_LABELS),
        },
    }


def _probe(failure_threshold: int) -> dict[str, Any]:
    return {
        "failureThreshold": failure_threshold,
        "httpGet": {"path": "/healthz", "port": 10254, "scheme": "HTTP"},
        "initialDelaySeconds": 10,
        "periodSeconds": 10,
        "successThreshold": 1,
        "timeoutSeconds": 1,
    }


def create_controller_container_spec(*, args: list[str]) -> dict[str, Any]:
    """Create the NGINX controller container spec.

    Parameters
    ----------
    args : `list` of `str`
        Command line of the ``nginx-ingress-controller`` process.
    """
    return {
        "name": "controller",
        "image": CONTROLLER_IMAGE,
        "imagePullPolicy": "IfNotPresent",
        "lifecycle": {"preStop": {"exec": {"command": ["/wait-shutdown"]}}},
        "args": args,
        "securityContext": {
            "capabilities": {"drop": ["ALL"], "add": ["NET_BIND_SERVICE"]},
            "runAsUser": 101,
            "allowPrivilegeEscalation": True,
        },
        "env": [
            {
                "name": "POD_NAME",
                "valueFrom": {"fieldRef": {"fieldPath": "metadata.name"}},
            },
            {
                "name": "POD_NAMESPACE",
                "valueFrom": {"fieldRef": {"fieldPath": "metadata.namespace"}},
            },
            {"name": "LD_PRELOAD", "value": "/usr/local/lib/libmimalloc.so"},
        ],
        "livenessProbe": _probe(5),
        "readinessProbe": _probe(3),
        "ports": [
            {"name": "http", "containerPort": 80, "protocol": "TCP"},
            {"name": "https", "containerPort": 443, "protocol": "TCP"},
            {"name": "webhook", "containerPort": 8443, "protocol": "TCP"},
        ],
        "resources": {"requests": {"cpu": "100m", "memory": "90Mi"}},
    }


def _deployment(
    *, name: str, pod_spec: dict[str, Any], replicas: int
) -> dict[str, Any]:
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": name, "labels": _labels("controller")},
        "spec": {
            "replicas": replicas,
            "selector": {"matchLabels": dict(SELECTOR_LABELS)},
            "revisionHistoryLimit": 10,
            "minReadySeconds": 0,
            "template": {
                "metadata": {"labels": dict(SELECTOR_LABELS)},
                "spec": pod_spec,
            },
        },
    }


def create_controller_deployment(
    *, pool: str, replicas: int = 1
) -> dict[str, Any]:
    """Create the Deployment of the ingress controller serving ``pool``.

    Parameters
    ----------
    pool : `str`
        Name of the node pool. The pods are pinned to the pool with a node
        selector and the pool name is the ingress class.
    replicas : `int`
        Number of ingress controller pods.

    Returns
    -------
    deployment : `dict`
        The Deployment resource.
    """
    container = create_controller_container_spec(
        args=[
            "/nginx-ingress-controller",
            f"--election-id=ingress-controller-leader-edge-{pool}",
            f"--ingress-class={pool}",
            "--configmap=$(POD_NAMESPACE)/ingress-nginx-controller",
        ]
    )
    pod_spec = {
        "dnsPolicy": "ClusterFirst",
        "containers": [container],
        "nodeSelector": {
            "kubernetes.io/os": "linux",
            "apps.openyurt.io/nodepool": pool,
        },
        "serviceAccountName": CONTROLLER_NAME,
        "terminationGracePeriodSeconds": 300,
    }
    return _deployment(
        name=CONTROLLER_SERVICE_NAME, pod_spec=pod_spec, replicas=replicas
    )


def create_webhook_deployment(
    *, pool: str, replicas: int = 1
) -> dict[str, Any]:
    """Create the Deployment serving the admission webhook of ``pool``.

    These pods run on cloud nodes, where the API server can reach them, and
    mount the certificate produced by the ``admission-create`` job.
    """
    container = create_controller_container_spec(
        args=[
            "/nginx-ingress-controller",
            f"--election-id=ingress-controller-leader-cloud-{pool}",
            f"--ingress-class={pool}",
            "--update-status=false",
            "--configmap=$(POD_NAMESPACE)/ingress-nginx-controller",
            "--validating-webhook=:8443",
            "--validating-webhook-certificate=/usr/local/certificates/cert",
            "--validating-webhook-key=/usr/local/certificates/key",
        ]
    )
    container["volumeMounts"] = [
        {
            "name": "webhook-cert",
            "mountPath": "/usr/local/certificates/",
            "readOnly": True,
        }
    ]
    pod_spec = {
        "dnsPolicy": "ClusterFirst",
        "containers": [container],
        "nodeSelector": {
            "openyurt.io/is-edge-worker": "false",
            "kubernetes.io/arch": "amd64",
            "kubernetes.io/os": "linux",
        },
        "serviceAccountName": CONTROLLER_NAME,
        "terminationGracePeriodSeconds": 300,
        "volumes": [
            {
                "name": "webhook-cert",
                "secret": {"secretName": ADMISSION_NAME},
            }
        ],
    }
    return _deployment(
        name="ingress-nginx-validating", pod_spec=pod_spec, replicas=replicas
    )


def create_validating_webhook_configuration() -> dict[str, Any]:
    """Create the ValidatingWebhookConfiguration for ingress objects.

    The name and service namespace are per pool and are set by the caller.
    """
    return {
        "apiVersion": "admissionregistration.k8s.io/v1",
        "kind": "ValidatingWebhookConfiguration",
        "metadata": {
            "name": ADMISSION_NAME,
            "labels": _labels("admission-webhook"),
        },
        "webhooks": [
            {
                "name": "validate.nginx.ingress.kubernetes.io",
                "matchPolicy": "Equivalent",
                "rules": [
                    {
                        "apiGroups": ["networking.k8s.io"],
                        "apiVersions": ["v1"],
                        "operations": ["CREATE", "UPDATE"],
                        "resources": ["ingresses"],
                    }
                ],
                "failurePolicy": "Fail",
                "sideEffects": "None",
                "admissionReviewVersions": ["v1"],
                "clientConfig": {
                    "service": {
                        "name": ADMISSION_SERVICE_NAME,
                        "path": "/networking/v1/ingresses",
                    }
                },
            }
        ],
    }


def _certgen_job(*, name: str, args: list[str]) -> dict[str, Any]:
    labels = _labels("admission-webhook")
    return {
        "apiVersion": "batch/v1",
        "kind": "Job",
        "metadata": {
            "name": name,
            "annotations": dict(HELM_HOOK_ANNOTATIONS),
            "labels": labels,
        },
        "spec": {
            "template": {
                "metadata": {"name": name, "labels": dict(labels)},
                "spec": {
                    "containers": [
                        {
                            "name": name.rsplit("-", 1)[-1],
                            "image": CERTGEN_IMAGE,
                            "imagePullPolicy": "IfNotPresent",
                            "args": args,
                            "env": [
                                {
                                    "name": "POD_NAMESPACE",
                                    "valueFrom": {
                                        "fieldRef": {
                                            "fieldPath": "metadata.namespace"
                                        }
                                    },
                                }
                            ],
                        }
                    ],
                    "nodeSelector": {
                        "openyurt.io/is-edge-worker": "false",
                        "kubernetes.io/arch": "amd64",
                        "kubernetes.io/os": "linux",
                    },
                    "restartPolicy": "OnFailure",
                    "serviceAccountName": ADMISSION_NAME,
                    "securityContext": {
                        "runAsNonRoot": True,
                        "runAsUser": 2000,
                    },
                },
            }
        },
    }


def create_webhook_job() -> dict[str, Any]:
    """Create the one-shot Job that issues the webhook certificate."""
    return _certgen_job(
        name="ingress-nginx-admission-create",
        args=[
            "create",
            (
                f"--host={ADMISSION_SERVICE_NAME},"
                f"{ADMISSION_SERVICE_NAME}.$(POD_NAMESPACE).svc"
            ),
            "--namespace=$(POD_NAMESPACE)",
            f"--secret-name={ADMISSION_NAME}",
        ],
    )


def create_webhook_job_patch(*, webhook_name: str) -> dict[str, Any]:
    """Create the one-shot Job that injects the webhook CA bundle.

    Parameters
    ----------
    webhook_name : `str`
        Name of the pool's ValidatingWebhookConfiguration to patch.
    """
    return _certgen_job(
        name="ingress-nginx-admission-patch",
        args=[
            "patch",
            f"--webhook-name={webhook_name or ADMISSION_NAME}",
            "--namespace=$(POD_NAMESPACE)",
            "--patch-mutating=false",
            f"--secret-name={ADMISSION_NAME}",
            "--patch-failure-policy=Fail",
        ],
    )


def create_webhook_service_account() -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "ServiceAccount",
        "metadata": {
            "name": ADMISSION_NAME,
            "annotations": dict(HELM_HOOK_ANNOTATIONS),
            "labels": _labels("admission-webhook"),
        },
    }


def create_webhook_role() -> dict[str, Any]:
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "Role",
        "metadata": {
            "name": ADMISSION_NAME,
            "annotations": dict(HELM_HOOK_ANNOTATIONS),
            "labels": _labels("admission-webhook"),
        },
        "rules": [_rule([""], ["secrets"], ["get", "create"])],
    }


def _replicas(subs: Mapping[str, str]) -> int:
    return int(subs["replicas"] or 1)


TEMPLATES: dict[str, Callable[[Mapping[str, str]], dict[str, Any]]] = {
    CONTROLLER_CLUSTER_ROLE: lambda subs: create_controller_cluster_role(),
    WEBHOOK_CLUSTER_ROLE: lambda subs: create_webhook_cluster_role(),
    CONTROLLER_SERVICE_ACCOUNT: (
        lambda subs: create_controller_service_account()
    ),
    CONTROLLER_CONFIG_MAP: lambda subs: create_controller_config_map(),
    CONTROLLER_CLUSTER_ROLE_BINDING: lambda subs: create_cluster_role_binding(
        role_name=CONTROLLER_NAME, service_account=CONTROLLER_NAME
    ),
    CONTROLLER_ROLE: lambda subs: create_controller_role(
        pool=subs["nodepool_name"]
    ),
    CONTROLLER_ROLE_BINDING: lambda subs: create_role_binding(
        name=CONTROLLER_NAME, component="controller"
    ),
    CONTROLLER_SERVICE: lambda subs: create_controller_service(),
    CONTROLLER_DEPLOYMENT: lambda subs: create_controller_deployment(
        pool=subs["nodepool_name"], replicas=_replicas(subs)
    ),
    WEBHOOK_SERVICE_ACCOUNT: lambda subs: create_webhook_service_account(),
    WEBHOOK_CLUSTER_ROLE_BINDING: lambda subs: create_cluster_role_binding(
        role_name=ADMISSION_NAME,
        service_account=ADMISSION_NAME,
        component="admission-webhook",
    ),
    WEBHOOK_ROLE: lambda subs: create_webhook_role(),
    WEBHOOK_ROLE_BINDING: lambda subs: create_role_binding(
        name=ADMISSION_NAME, component="admission-webhook"
    ),
    WEBHOOK_SERVICE: lambda subs: create_webhook_service(),
    VALIDATING_WEBHOOK_CONFIGURATION: (
        lambda subs: create_validating_webhook_configuration()
    ),
    WEBHOOK_JOB: lambda subs: create_webhook_job(),
    WEBHOOK_JOB_PATCH: lambda subs: create_webhook_job_patch(
        webhook_name=subs["webhook_name"]
    ),
    WEBHOOK_DEPLOYMENT: lambda subs: create_webhook_deployment(
        pool=subs["nodepool_name"], replicas=_replicas(subs)
    ),
}
"""Template builders by template name."""
