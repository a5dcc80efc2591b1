"""Tests for the nodepoolingressoperator.k8s module."""

from __future__ import annotations

from unittest import mock

import pytest
from kubernetes.client.exceptions import ApiException

from nodepoolingressoperator.errors import AlreadyExistsError, NotFoundError
from nodepoolingressoperator.ingress import (
    NODEPOOL,
    NODEPOOL_INGRESS,
    YURT_INGRESS,
)
from nodepoolingressoperator.k8s import ClusterClient
from nodepoolingressoperator.manifests import (
    CONTROLLER_CLUSTER_ROLE_BINDING,
    CONTROLLER_DEPLOYMENT,
    Manifest,
    parse_manifest,
    render_manifest,
)


@pytest.fixture
def k8s() -> mock.MagicMock:
    k8s_client = mock.MagicMock()
    serializer = k8s_client.ApiClient.return_value
    serializer.sanitize_for_serialization.side_effect = lambda obj: obj
    return k8s_client


def _deployment() -> Manifest:
    return parse_manifest(
        render_manifest(CONTROLLER_DEPLOYMENT, {"nodepool_name": "p1"})
    ).in_namespace("nodepool-p1")


def test_create_namespaced_object(k8s: mock.MagicMock) -> None:
    manifest = _deployment()
    ClusterClient(k8s).create(manifest)
    api = k8s.AppsV1Api.return_value
    api.create_namespaced_deployment.assert_called_once_with(
        body=manifest.body, namespace="nodepool-p1"
    )


def test_create_cluster_scoped_object(k8s: mock.MagicMock) -> None:
    manifest = parse_manifest(
        render_manifest(CONTROLLER_CLUSTER_ROLE_BINDING)
    ).named("clusterrole-binding-nodepool-p1")
    ClusterClient(k8s).create(manifest)
    api = k8s.RbacAuthorizationV1Api.return_value
    api.create_cluster_role_binding.assert_called_once_with(
        body=manifest.body
    )


def test_delete_propagates_to_dependents(k8s: mock.MagicMock) -> None:
    ClusterClient(k8s).delete(_deployment())
    api = k8s.AppsV1Api.return_value
    api.delete_namespaced_deployment.assert_called_once_with(
        name="ingress-nginx-controller",
        propagation_policy="Background",
        namespace="nodepool-p1",
    )


def test_update_patches(k8s: mock.MagicMock) -> None:
    manifest = _deployment()
    ClusterClient(k8s).update(manifest)
    api = k8s.AppsV1Api.return_value
    api.patch_namespaced_deployment.assert_called_once_with(
        name="ingress-nginx-controller",
        body=manifest.body,
        namespace="nodepool-p1",
    )


def test_api_exceptions_are_classified(k8s: mock.MagicMock) -> None:
    api = k8s.AppsV1Api.return_value
    api.create_namespaced_deployment.side_effect = ApiException(
        status=409, reason="AlreadyExists"
    )
    api.read_namespaced_deployment.side_effect = ApiException(
        status=404, reason="NotFound"
    )
    client = ClusterClient(k8s)
    with pytest.raises(AlreadyExistsError):
        client.create(_deployment())
    with pytest.raises(NotFoundError):
        client.get(_deployment())


def test_namespaced_custom_object(k8s: mock.MagicMock) -> None:
    ClusterClient(k8s).get_custom(
        NODEPOOL_INGRESS, "nodepool-ingress", "kube-system"
    )
    api = k8s.CustomObjectsApi.return_value
    api.get_namespaced_custom_object.assert_called_once_with(
        group="apps.openyurt.io",
        version="v1alpha1",
        plural="nodepoolingresses",
        name="nodepool-ingress",
        namespace="kube-system",
    )


def test_cluster_custom_object_status(k8s: mock.MagicMock) -> None:
    ClusterClient(k8s).patch_custom_status(
        YURT_INGRESS, "yurtingress-singleton", {"pools": ["p1"]}
    )
    api = k8s.CustomObjectsApi.return_value
    api.patch_cluster_custom_object_status.assert_called_once_with(
        group="apps.openyurt.io",
        version="v1alpha1",
        plural="yurtingresses",
        name="yurtingress-singleton",
        body={"status": {"pools": ["p1"]}},
    )


def test_list_custom(k8s: mock.MagicMock) -> None:
    api = k8s.CustomObjectsApi.return_value
    api.list_cluster_custom_object.return_value = {
        "items": [{"metadata": {"name": "hangzhou"}}]
    }
    items = ClusterClient(k8s).list_custom(NODEPOOL)
    assert items == [{"metadata": {"name": "hangzhou"}}]
