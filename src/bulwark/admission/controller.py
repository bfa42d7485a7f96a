"""
Security context constraint admission.

For every container of an incoming pod, walks the principal's candidate
policies in name order, generating and validating a security context on
a clone of the pod. The first candidate that validates cleanly wins for
that container. Contexts, together with any generated pod annotations,
are committed onto the real pod only once every container has a
winner; otherwise the request is denied and the pod is left as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from bulwark.admission.base import (
    AdmissionPlugin,
    AdmissionResult,
    DenialReason,
    Operation,
    parse_operation,
)
from bulwark.admission.matcher import PolicyMatcher
from bulwark.allocation import Allocator
from bulwark.clone import Cloner, DeepCopyCloner
from bulwark.errors import (
    AllocationError,
    CollaboratorLookupError,
    ConfigurationError,
    ErrorType,
    FieldError,
    ValidationErrorList,
)
from bulwark.models import Pod, Principal, SecurityContext, SecurityPolicy
from bulwark.observability import get_logger
from bulwark.provider import PolicyProvider, create_provider
from bulwark.stores.base import IdentityStore, PolicyStore, VolumeStore
from bulwark.strategies import DEFAULT_NON_ROOT_UID
from bulwark.strategies.base import RUN_AS_USER_FIELD

logger = logging.getLogger(__name__)


@dataclass
class _Assignment:
    """A context chosen for one container, waiting for commit."""

    spec_field: str
    index: int
    container_name: str
    context: SecurityContext
    policy_name: str
    pod_annotations: dict[str, str] = field(default_factory=dict)


@dataclass
class _Mismatch:
    """A container no candidate could satisfy."""

    container_name: str
    policy_name: str
    errors: ValidationErrorList


class SecurityContextConstraintAdmission(AdmissionPlugin):
    """
    Admission plugin enforcing security context constraints.

    Every request is evaluated against explicit inputs: the policy
    snapshot listed for it and the principal resolved for it. Providers
    are built fresh per request; nothing is cached between requests.
    """

    def __init__(
        self,
        policy_store: PolicyStore,
        identity_store: IdentityStore,
        allocator: Allocator | None = None,
        volume_store: VolumeStore | None = None,
        cloner: Cloner | None = None,
        non_root_uid: int = DEFAULT_NON_ROOT_UID,
    ):
        """
        Initialize the admission plugin.

        Args:
            policy_store: Source of visible policies
            identity_store: Source of service account identities
            allocator: Allocator for range based run-as user rules
            volume_store: Store for volumes the pod does not declare
            cloner: Cloner for trial evaluation (default: deep copy)
            non_root_uid: Fallback uid for MustRunAsNonRoot
        """
        self._matcher = PolicyMatcher(policy_store)
        self._identity_store = identity_store
        self._allocator = allocator
        self._volume_store = volume_store
        self._cloner = cloner or DeepCopyCloner()
        self._non_root_uid = non_root_uid
        self._events = get_logger("admission")

    def admit(
        self, pod: Pod, namespace: str, operation: Union[Operation, str] = Operation.CREATE
    ) -> AdmissionResult:
        """
        Admit or deny a pod.

        On admission the chosen security contexts are written onto the
        pod's containers in place, and generated pod annotations are
        added. On denial the pod is not modified.

        Args:
            pod: Pod being created or updated
            namespace: Namespace of the request
            operation: Request operation

        Returns:
            AdmissionResult
        """
        namespace = namespace or pod.namespace

        try:
            op = parse_operation(operation)
        except ValueError:
            return self._deny(pod, namespace, DenialReason.BAD_REQUEST, f"unknown operation {operation!r}")

        if not self.handles(op):
            return AdmissionResult.admit(pod, namespace, message=f"{op.value} is not subject to admission")

        self._events.admission_started(pod.name, namespace, op.value)

        if pod.namespace and pod.namespace != namespace:
            return self._deny(
                pod,
                namespace,
                DenialReason.BAD_REQUEST,
                f"pod namespace {pod.namespace} does not match request namespace {namespace}",
            )

        if not pod.service_account_name:
            return self._deny(pod, namespace, DenialReason.BAD_REQUEST, "pod has no service account")

        try:
            principal = self._resolve_principal(namespace, pod.service_account_name)
            candidates = self._matcher.candidates_for(principal)
        except CollaboratorLookupError as e:
            return self._deny(pod, namespace, DenialReason.LOOKUP_FAILURE, str(e))

        logger.debug(f"Candidates for {principal.user}: {[p.name for p in candidates]}")

        providers, config_errors = self._build_providers(candidates)
        if not providers:
            message = f"no security context constraints available to {principal.user}"
            return self._deny(
                pod, namespace, DenialReason.NO_MATCHING_POLICY, message, errors=config_errors
            )

        try:
            assignments, mismatch = self._match_containers(pod, namespace, providers)
        except CollaboratorLookupError as e:
            return self._deny(pod, namespace, DenialReason.LOOKUP_FAILURE, str(e))

        if mismatch is not None:
            message = (
                f"container {mismatch.container_name} is not permitted by any security "
                f"context constraint (last tried {mismatch.policy_name}): {mismatch.errors}"
            )
            return self._deny(
                pod,
                namespace,
                DenialReason.POLICY_MISMATCH,
                message,
                errors=mismatch.errors,
                container=mismatch.container_name,
            )

        policies: dict[str, str] = {}
        for assignment in assignments:
            container = pod.container_at(assignment.spec_field, assignment.index)
            container.security_context = assignment.context
            pod.annotations.update(assignment.pod_annotations)
            policies[assignment.container_name] = assignment.policy_name

        self._events.admission_admitted(pod.name, namespace, policies)
        return AdmissionResult.admit(pod, namespace, policies=policies)

    def _resolve_principal(self, namespace: str, service_account: str) -> Principal:
        identity = self._identity_store.get_service_identity(namespace, service_account)
        return Principal.for_service_identity(identity)

    def _build_providers(
        self, candidates: list[SecurityPolicy]
    ) -> tuple[list[PolicyProvider], ValidationErrorList]:
        providers: list[PolicyProvider] = []
        errors = ValidationErrorList()

        for policy in candidates:
            try:
                providers.append(
                    create_provider(
                        policy,
                        allocator=self._allocator,
                        volume_store=self._volume_store,
                        non_root_uid=self._non_root_uid,
                    )
                )
            except ConfigurationError as e:
                logger.warning(f"Excluding misconfigured policy {policy.name}: {e}")
                errors.append(FieldError("policy", policy.name, str(e), ErrorType.INTERNAL))

        return providers, errors

    def _match_containers(
        self, pod: Pod, namespace: str, providers: list[PolicyProvider]
    ) -> tuple[list[_Assignment], Optional[_Mismatch]]:
        assignments: list[_Assignment] = []
        # pod level annotations chosen for earlier containers
        pending: dict[str, str] = {}

        for spec_field, index, container in pod.iter_containers():
            last_errors = ValidationErrorList()
            last_policy = ""

            for provider in providers:
                trial = self._cloner.clone(pod)
                trial.namespace = namespace
                trial_container = trial.container_at(spec_field, index)
                last_policy = provider.policy_name

                try:
                    context = provider.create_security_context(trial, trial_container)
                except AllocationError as e:
                    last_errors = ValidationErrorList.internal(RUN_AS_USER_FIELD, str(e))
                    self._events.candidate_rejected(provider.policy_name, container.name, [str(e)])
                    continue

                # pending annotations go on after generation so contexts reflect the submitted pod
                trial.annotations.update(pending)
                generated = provider.create_pod_annotations(trial)
                trial.annotations.update(generated)
                trial_container.security_context = context

                errs = provider.validate_security_context(trial, trial_container)
                if errs:
                    last_errors = errs
                    self._events.candidate_rejected(
                        provider.policy_name, container.name, [str(err) for err in errs]
                    )
                    continue

                pending.update(generated)
                assignments.append(
                    _Assignment(
                        spec_field, index, container.name, context, provider.policy_name, generated
                    )
                )
                break
            else:
                return assignments, _Mismatch(container.name, last_policy, last_errors)

        return assignments, None

    def _deny(
        self,
        pod: Pod,
        namespace: str,
        reason: DenialReason,
        message: str,
        errors: ValidationErrorList | None = None,
        container: str | None = None,
    ) -> AdmissionResult:
        self._events.admission_denied(pod.name, namespace, reason.value, message)
        return AdmissionResult.deny(pod, namespace, reason, message, errors, container)
