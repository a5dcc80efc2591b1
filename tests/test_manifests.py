"""Tests for the nodepoolingressoperator.manifests module."""

from __future__ import annotations

import pytest
import yaml

from nodepoolingressoperator.errors import ManifestError
from nodepoolingressoperator.manifests import (
    CONTROLLER_CLUSTER_ROLE_BINDING,
    CONTROLLER_DEPLOYMENT,
    CONTROLLER_ROLE,
    TEMPLATES,
    VALIDATING_WEBHOOK_CONFIGURATION,
    WEBHOOK_DEPLOYMENT,
    WEBHOOK_JOB_PATCH,
    Manifest,
    ObjectKind,
    create_namespace,
    parse_manifest,
    render_manifest,
)


def test_controller_deployment() -> None:
    deployment = render_manifest(
        CONTROLLER_DEPLOYMENT, {"nodepool_name": "hangzhou", "replicas": "3"}
    )
    expected = yaml.safe_load(
        """
apiVersion: apps/v1
kind: Deployment
metadata:
  name: ingress-nginx-controller
spec:
  replicas: 3
  template:
    spec:
      nodeSelector:
        kubernetes.io/os: linux
        apps.openyurt.io/nodepool: hangzhou
      serviceAccountName: ingress-nginx
"""
    )
    assert deployment["apiVersion"] == expected["apiVersion"]
    assert deployment["kind"] == expected["kind"]
    assert deployment["metadata"]["name"] == expected["metadata"]["name"]
    assert deployment["spec"]["replicas"] == expected["spec"]["replicas"]
    pod_spec = deployment["spec"]["template"]["spec"]
    expected_pod_spec = expected["spec"]["template"]["spec"]
    assert pod_spec["nodeSelector"] == expected_pod_spec["nodeSelector"]
    assert (
        pod_spec["serviceAccountName"]
        == expected_pod_spec["serviceAccountName"]
    )

    args = pod_spec["containers"][0]["args"]
    assert "--election-id=ingress-controller-leader-edge-hangzhou" in args
    assert "--ingress-class=hangzhou" in args


def test_webhook_deployment_uses_cloud_election_id() -> None:
    deployment = render_manifest(
        WEBHOOK_DEPLOYMENT, {"nodepool_name": "beijing", "replicas": "1"}
    )
    container = deployment["spec"]["template"]["spec"]["containers"][0]
    assert (
        "--election-id=ingress-controller-leader-cloud-beijing"
        in container["args"]
    )
    assert "--validating-webhook=:8443" in container["args"]
    assert deployment["spec"]["replicas"] == 1


def test_controller_role_embeds_pool_name() -> None:
    role = render_manifest(CONTROLLER_ROLE, {"nodepool_name": "p1"})
    names = [
        name
        for rule in role["rules"]
        for name in rule.get("resourceNames", [])
    ]
    assert names == [
        "ingress-controller-leader-edge-p1",
        "ingress-controller-leader-cloud-p1",
    ]


def test_webhook_job_patch_names_webhook() -> None:
    job = render_manifest(
        WEBHOOK_JOB_PATCH, {"webhook_name": "webhook-admission-nodepool-p1"}
    )
    container = job["spec"]["template"]["spec"]["containers"][0]
    assert "--webhook-name=webhook-admission-nodepool-p1" in container["args"]
    assert container["name"] == "patch"


def test_every_template_parses() -> None:
    substitutions = {
        "nodepool_name": "p1",
        "webhook_name": "w",
        "replicas": "2",
    }
    for template in TEMPLATES:
        manifest = parse_manifest(render_manifest(template, substitutions))
        assert manifest.name


def test_render_unknown_template() -> None:
    with pytest.raises(ManifestError):
        render_manifest("no-such-template")


def test_parse_manifest_rejects_unknown_kind() -> None:
    body = yaml.safe_load(
        """
apiVersion: v1
kind: Secret
metadata:
  name: ingress-nginx-admission
"""
    )
    with pytest.raises(ManifestError):
        parse_manifest(body)


def test_parse_manifest_requires_name() -> None:
    with pytest.raises(ManifestError):
        parse_manifest({"apiVersion": "v1", "kind": "ConfigMap"})


def test_namespace_manifest() -> None:
    manifest = parse_manifest(create_namespace(name="nodepool-p1"))
    assert manifest.kind is ObjectKind.NAMESPACE
    assert manifest.namespace is None
    assert str(manifest) == "namespace/nodepool-p1"
    # Cluster-scoped objects never get a metadata.namespace.
    moved = manifest.in_namespace("elsewhere")
    assert "namespace" not in moved.body["metadata"]


def test_cluster_role_binding_in_namespace() -> None:
    binding = (
        parse_manifest(render_manifest(CONTROLLER_CLUSTER_ROLE_BINDING))
        .named("clusterrole-binding-nodepool-p1")
        .in_namespace("nodepool-p1")
    )
    assert binding.name == "clusterrole-binding-nodepool-p1"
    assert binding.namespace is None
    assert binding.body["roleRef"]["name"] == "ingress-nginx"
    assert binding.body["subjects"][0]["namespace"] == "nodepool-p1"


def test_webhook_configuration_in_namespace() -> None:
    template = parse_manifest(
        render_manifest(VALIDATING_WEBHOOK_CONFIGURATION)
    )
    moved = template.in_namespace("yurtingress-p1")
    service = moved.body["webhooks"][0]["clientConfig"]["service"]
    assert service["namespace"] == "yurtingress-p1"
    assert service["path"] == "/networking/v1/ingresses"
    # The rendered manifest is not modified.
    template_service = template.body["webhooks"][0]["clientConfig"]["service"]
    assert "namespace" not in template_service


def test_manifest_named_returns_copy() -> None:
    manifest = Manifest(
        kind=ObjectKind.CONFIG_MAP,
        body={"metadata": {"name": "a", "namespace": "ns"}},
    )
    renamed = manifest.named("b")
    assert manifest.name == "a"
    assert renamed.name == "b"
    assert renamed.namespace == "ns"
