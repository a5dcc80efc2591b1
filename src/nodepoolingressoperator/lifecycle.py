"""Creation, scaling, and teardown of the ingress stack of a node pool."""

from __future__ import annotations

__all__ = (
    "CREATE_STEPS",
    "DELETE_STEPS",
    "SHARED_TEMPLATES",
    "PoolLifecycle",
    "PoolStep",
)

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from nodepoolingressoperator import manifests
from nodepoolingressoperator.errors import (
    AlreadyExistsError,
    ClusterError,
    NotFoundError,
    PoolNamespaceError,
)
from nodepoolingressoperator.ingress import IngressKind
from nodepoolingressoperator.k8s import ClusterClient
from nodepoolingressoperator.manifests import (
    Manifest,
    create_namespace,
    parse_manifest,
    render_manifest,
)

CLUSTER_ROLE_BINDING_PREFIX = "clusterrole-binding"
WEBHOOK_CLUSTER_ROLE_BINDING_PREFIX = "webhook-clusterrole-binding"
WEBHOOK_CONFIGURATION_PREFIX = "webhook-admission"

WEBHOOK_REPLICAS = 1


@dataclass(frozen=True)
class PoolStep:
    """One object of a node pool's ingress stack.

    Parameters
    ----------
    template : `str`
        Template name (see `nodepoolingressoperator.manifests`).
    name_prefix : `str`, optional
        Cluster-scoped objects that belong to a single pool are renamed to
        ``<name_prefix>-<pool namespace>``.
    replicas : `int`, optional
        Fixed replica count of a deployment. Deployments without one get the
        replica count of the pool.
    """

    template: str
    name_prefix: str | None = None
    replicas: int | None = None


CREATE_STEPS: tuple[PoolStep, ...] = (
    PoolStep(manifests.CONTROLLER_SERVICE_ACCOUNT),
    PoolStep(manifests.CONTROLLER_CONFIG_MAP),
    PoolStep(
        manifests.CONTROLLER_CLUSTER_ROLE_BINDING,
        name_prefix=CLUSTER_ROLE_BINDING_PREFIX,
    ),
    PoolStep(manifests.CONTROLLER_ROLE),
    PoolStep(manifests.CONTROLLER_ROLE_BINDING),
    PoolStep(manifests.CONTROLLER_SERVICE),
    PoolStep(manifests.CONTROLLER_DEPLOYMENT),
    PoolStep(manifests.WEBHOOK_SERVICE_ACCOUNT),
    PoolStep(
        manifests.WEBHOOK_CLUSTER_ROLE_BINDING,
        name_prefix=WEBHOOK_CLUSTER_ROLE_BINDING_PREFIX,
    ),
    PoolStep(manifests.WEBHOOK_ROLE),
    PoolStep(manifests.WEBHOOK_ROLE_BINDING),
    PoolStep(manifests.WEBHOOK_SERVICE),
    PoolStep(
        manifests.VALIDATING_WEBHOOK_CONFIGURATION,
        name_prefix=WEBHOOK_CONFIGURATION_PREFIX,
    ),
    PoolStep(manifests.WEBHOOK_JOB),
    PoolStep(manifests.WEBHOOK_JOB_PATCH),
    PoolStep(manifests.WEBHOOK_DEPLOYMENT, replicas=WEBHOOK_REPLICAS),
)
"""Objects of a pool's stack, in creation order (after the namespace)."""

_DELETE_ORDER = (
    manifests.WEBHOOK_DEPLOYMENT,
    manifests.CONTROLLER_DEPLOYMENT,
    manifests.WEBHOOK_JOB_PATCH,
    manifests.WEBHOOK_JOB,
    manifests.VALIDATING_WEBHOOK_CONFIGURATION,
    manifests.WEBHOOK_SERVICE,
    manifests.CONTROLLER_SERVICE,
    manifests.WEBHOOK_ROLE_BINDING,
    manifests.CONTROLLER_ROLE_BINDING,
    manifests.WEBHOOK_ROLE,
    manifests.CONTROLLER_ROLE,
    manifests.CONTROLLER_CONFIG_MAP,
    manifests.WEBHOOK_SERVICE_ACCOUNT,
    manifests.CONTROLLER_SERVICE_ACCOUNT,
    manifests.WEBHOOK_CLUSTER_ROLE_BINDING,
    manifests.CONTROLLER_CLUSTER_ROLE_BINDING,
)

DELETE_STEPS: tuple[PoolStep, ...] = tuple(
    step
    for template in _DELETE_ORDER
    for step in CREATE_STEPS
    if step.template == template
)
"""Objects of a pool's stack, in deletion order (before the namespace)."""

SHARED_TEMPLATES = (
    manifests.CONTROLLER_CLUSTER_ROLE,
    manifests.WEBHOOK_CLUSTER_ROLE,
)
"""ClusterRoles shared by the stacks of all pools."""


class PoolLifecycle:
    """Create and delete the ingress stacks of node pools.

    Parameters
    ----------
    client : `~nodepoolingressoperator.k8s.ClusterClient`
        Client for the cluster.
    kind : `~nodepoolingressoperator.ingress.IngressKind`
        The ingress resource kind that owns the stacks; it decides the
        namespace of each pool.
    logger
        Logger; defaults to a structlog logger.
    """

    def __init__(
        self,
        client: ClusterClient,
        kind: IngressKind,
        logger: Any | None = None,
    ) -> None:
        self._client = client
        self._kind = kind
        self._logger = logger or structlog.getLogger(__name__)

    def pool_namespace(self, pool: str) -> str:
        return self._kind.pool_namespace(pool)

    def render_step(
        self, step: PoolStep, pool: str, replicas: int = 1
    ) -> Manifest:
        """Render the object of ``step`` for ``pool``."""
        namespace = self.pool_namespace(pool)
        if step.replicas is not None:
            replicas = step.replicas
        substitutions = {
            "nodepool_name": pool,
            "webhook_name": f"{WEBHOOK_CONFIGURATION_PREFIX}-{namespace}",
            "replicas": str(replicas),
        }
        manifest = parse_manifest(
            render_manifest(step.template, substitutions)
        )
        if step.name_prefix is not None:
            manifest = manifest.named(f"{step.name_prefix}-{namespace}")
        return manifest.in_namespace(namespace)

    def render_steps(
        self, pool: str, steps: Sequence[PoolStep], replicas: int = 1
    ) -> list[Manifest]:
        """Render the objects a pipeline of steps touches, in order."""
        return [self.render_step(step, pool, replicas) for step in steps]

    def _create(self, manifest: Manifest) -> Exception | None:
        try:
            self._client.create(manifest)
        except AlreadyExistsError:
            self._logger.debug(f"{manifest} already exists")
        except ClusterError as e:
            self._logger.error(str(e))
            return e
        else:
            self._logger.info(f"{manifest} is created")
        return None

    def _delete(self, manifest: Manifest) -> Exception | None:
        try:
            self._client.delete(manifest)
        except NotFoundError:
            self._logger.debug(f"{manifest} is already deleted")
        except ClusterError as e:
            self._logger.error(str(e))
            return e
        else:
            self._logger.info(f"{manifest} is deleted")
        return None

    def _namespace_manifest(self, pool: str) -> Manifest:
        return parse_manifest(
            create_namespace(name=self.pool_namespace(pool))
        )

    def create_pool(self, pool: str, replicas: int) -> list[Exception]:
        """Deploy the ingress stack of ``pool``.

        Objects that already exist are left alone, so a partially created
        stack is completed by calling this again.

        Parameters
        ----------
        pool : `str`
            Name of the node pool.
        replicas : `int`
            Number of ingress controller replicas.

        Returns
        -------
        errors : `list` of `Exception`
            Failures of individual objects. Later objects are still attempted
            after a failure and nothing is rolled back.

        Raises
        ------
        PoolNamespaceError
            Raised if the pool namespace could not be created. No other
            object is attempted.
        """
        namespace = self._namespace_manifest(pool)
        try:
            self._client.create(namespace)
        except AlreadyExistsError:
            self._logger.debug(f"{namespace} already exists")
        except ClusterError as e:
            self._logger.error(f"namespace for {pool} is created failed: {e}")
            raise PoolNamespaceError(
                f"fail to create the namespace {namespace.name}: {e}"
            ) from e
        else:
            self._logger.info(f"{namespace} is created")

        errors: list[Exception] = []
        for manifest in self.render_steps(pool, CREATE_STEPS, replicas):
            error = self._create(manifest)
            if error is not None:
                errors.append(error)
        return errors

    def delete_pool(self, pool: str) -> list[Exception]:
        """Tear down the ingress stack of ``pool`` and its namespace.

        Returns
        -------
        errors : `list` of `Exception`
            Failures of individual objects. Missing objects are not errors
            and a failure does not stop the remaining deletions.
        """
        errors: list[Exception] = []
        objects = self.render_steps(pool, DELETE_STEPS)
        objects.append(self._namespace_manifest(pool))
        for manifest in objects:
            error = self._delete(manifest)
            if error is not None:
                errors.append(error)
        return errors

    def scale_pool(self, pool: str, replicas: int) -> list[Exception]:
        """Set the replica count of the ingress controller of ``pool``.

        Only ``spec.replicas`` of the deployment is updated. A missing
        deployment is recreated together with the rest of the pool's stack.

        Returns
        -------
        errors : `list` of `Exception`
            The failed update, or the failures of recreating the stack.
        """
        step = next(
            s for s in CREATE_STEPS
            if s.template == manifests.CONTROLLER_DEPLOYMENT
        )
        deployment = self.render_step(step, pool, replicas)
        patch = Manifest(
            kind=deployment.kind,
            body={
                "metadata": {
                    "name": deployment.name,
                    "namespace": deployment.namespace,
                },
                "spec": {"replicas": replicas},
            },
        )
        try:
            self._client.update(patch)
        except NotFoundError:
            self._logger.warning(
                f"{deployment} in {pool} is missing, recreate the stack"
            )
            try:
                return self.create_pool(pool, replicas)
            except PoolNamespaceError as e:
                return [e]
        except ClusterError as e:
            self._logger.error(str(e))
            return [e]
        self._logger.info(f"{deployment} in {pool} is scaled to {replicas}")
        return []
