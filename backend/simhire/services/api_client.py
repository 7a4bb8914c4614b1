"""
SimHire REST Client

Async client for the SimHire API built on httpx. Every call returns the
server's response envelope; failures are raised as typed errors so callers
can tell a rejected form from an expired login or a dropped connection.

Error taxonomy:
    ValidationError      - 400/422, or input rejected before sending
    AuthenticationError  - 401/403
    NetworkError         - the request never completed (status is None)
    DomainError          - any other non-2xx response
    BulkTransitionError  - one or more requests of a bulk status change failed

Usage:
    session = ClientSession()
    async with SimHireClient(session) as client:
        await client.login("hr@example.com", "secret")
        applications = await client.list_company_applications(status="interview")

The bearer token lives on the ClientSession passed in at construction; it is
attached to every request except login and register.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from simhire.config import get_settings
from simhire.schemas import (
    ApplicationCreate,
    ApplicationResponse,
    Envelope,
    InternshipApplicationCreate,
    InternshipApplicationResponse,
    InternshipCreate,
    InternshipResponse,
    JobCreate,
    JobResponse,
    Leaderboard,
    SimulasiResultResponse,
    SimulasiSubmit,
)
from simhire.services.pipeline import INTERNSHIP_POLICY, JOB_POLICY, InvalidStageError, StagePolicy

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Endpoints that must never carry a bearer token
PUBLIC_AUTH_ENDPOINTS = ("/auth/login", "/auth/register")

INVALID_JSON_MESSAGE = "Invalid JSON response from server"
MALFORMED_ENVELOPE_MESSAGE = "Malformed response from server"


# ==================== Errors ====================

class ApiError(Exception):
    """
    Base class for every client failure.

    Attributes:
        message: Human-readable reason, never empty
        status: HTTP status, None when no response was received
        details: Field-level errors or other server-provided detail
        code: Machine-readable error code from the server, if any
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        details: Any = None,
        code: Optional[str] = None,
    ):
        self.message = message or "Request failed"
        self.status = status
        self.details = details
        self.code = code
        super().__init__(self.message)


class ValidationError(ApiError):
    pass


class AuthenticationError(ApiError):
    pass


class NetworkError(ApiError):
    pass


class DomainError(ApiError):
    pass


class BulkTransitionError(ApiError):
    """Some requests of a bulk status change failed; the others were applied."""

    def __init__(self, succeeded: List[str], failed: Dict[str, BaseException]):
        self.succeeded = succeeded
        self.failed = failed
        total = len(succeeded) + len(failed)
        details = [{"id": app_id, "message": str(exc)} for app_id, exc in failed.items()]
        super().__init__(f"{len(failed)} of {total} status updates failed", details=details)


def error_for_status(
    status: int,
    message: str,
    details: Any = None,
    code: Optional[str] = None,
) -> ApiError:
    if status in (400, 422):
        error_cls: Type[ApiError] = ValidationError
    elif status in (401, 403):
        error_cls = AuthenticationError
    else:
        error_cls = DomainError
    return error_cls(message, status=status, details=details, code=code)


def _field_errors(exc: PydanticValidationError) -> List[Dict[str, str]]:
    return [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]


def validate_payload(model: Type[M], payload: Union[M, Dict[str, Any]]) -> M:
    """Check a request body locally so malformed input never reaches the API."""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError("Validation failed", details=_field_errors(e)) from e


def validate_stage(policy: StagePolicy, stage: Any) -> str:
    try:
        return policy.parse(stage).value
    except InvalidStageError as e:
        raise ValidationError(str(e), details={"allowed": e.allowed}) from e


# ==================== Session ====================

@dataclass
class ClientSession:
    """Holds the bearer token for one signed-in user."""

    token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def set_token(self, token: str) -> None:
        self.token = token

    def clear_token(self) -> None:
        self.token = None


# ==================== Client ====================

def _clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Drop unset filters and render booleans the way the API reads them."""
    if not params:
        return None
    cleaned: Dict[str, Any] = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        cleaned[key] = value
    return cleaned or None


class SimHireClient:
    def __init__(
        self,
        session: Optional[ClientSession] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session if session is not None else ClientSession()
        self.base_url = (base_url or get_settings().api_base_url).rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, transport=transport)

    async def __aenter__(self) -> "SimHireClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, endpoint: str) -> Dict[str, str]:
        if endpoint.startswith(PUBLIC_AUTH_ENDPOINTS):
            return {}
        if not self.session.token:
            logger.debug(f"No auth token for {endpoint}; sending anonymously")
            return {}
        return {"Authorization": f"Bearer {self.session.token}"}

    async def request(
        self,
        method: str,
        endpoint: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Envelope:
        """
        Send one request and return the parsed envelope.

        Raises:
            NetworkError: no response was received
            ValidationError, AuthenticationError, DomainError: non-2xx status
        """
        try:
            response = await self._client.request(
                method,
                endpoint,
                json=json,
                params=_clean_params(params),
                headers=self._headers(endpoint),
            )
        except httpx.RequestError as e:
            message = str(e) or e.__class__.__name__
            logger.warning(f"API request failed: {method} {endpoint}: {message}")
            raise NetworkError(f"Network error: {message}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.is_success:
            raise self._error_from(method, endpoint, response, body)

        if body is None:
            return Envelope(success=False, message=INVALID_JSON_MESSAGE)
        try:
            return Envelope.model_validate(body)
        except PydanticValidationError:
            logger.warning(f"Unexpected response shape from {method} {endpoint}")
            return Envelope(success=False, message=MALFORMED_ENVELOPE_MESSAGE)

    def _error_from(self, method: str, endpoint: str, response: httpx.Response, body: Any) -> ApiError:
        message = None
        details = None
        code = None
        if isinstance(body, dict):
            nested = body.get("error") if isinstance(body.get("error"), dict) else {}
            message = body.get("message") or nested.get("message")
            details = body.get("errors") or nested.get("details")
            code = body.get("code") or nested.get("code")
        if not message:
            reason = response.reason_phrase or "Error"
            message = f"HTTP {response.status_code}: {reason}"

        logger.warning(
            f"API request failed: {method} {endpoint} -> {response.status_code}: {message}"
        )
        return error_for_status(response.status_code, message, details, code)

    @staticmethod
    def _extract(envelope: Envelope, key: str) -> Any:
        data = envelope.data if isinstance(envelope.data, dict) else {}
        if not envelope.success or key not in data:
            raise ApiError(envelope.message or f"Response is missing '{key}'")
        return data[key]

    def _parse_list(self, envelope: Envelope, key: str, model: Type[M]) -> List[M]:
        return [model.model_validate(item) for item in self._extract(envelope, key)]

    # ==================== Auth ====================

    async def login(self, email: str, password: str) -> Envelope:
        envelope = await self.request("POST", "/auth/login", json={"email": email, "password": password})
        self._store_token(envelope)
        return envelope

    async def register(self, data: Dict[str, Any]) -> Envelope:
        envelope = await self.request("POST", "/auth/register", json=data)
        self._store_token(envelope)
        return envelope

    def _store_token(self, envelope: Envelope) -> None:
        if envelope.success and isinstance(envelope.data, dict) and envelope.data.get("token"):
            self.session.set_token(envelope.data["token"])

    async def get_current_user(self) -> Envelope:
        return await self.request("GET", "/auth/me")

    async def update_profile(self, data: Dict[str, Any]) -> Envelope:
        return await self.request("PUT", "/auth/profile", json=data)

    async def logout(self) -> Envelope:
        try:
            return await self.request("POST", "/auth/logout")
        finally:
            self.session.clear_token()

    # ==================== Jobs ====================

    async def get_jobs(self, **filters: Any) -> Envelope:
        return await self.request("GET", "/jobs", params=filters)

    async def list_jobs(self, **filters: Any) -> List[JobResponse]:
        return self._parse_list(await self.get_jobs(**filters), "jobs", JobResponse)

    async def get_job(self, job_id: str) -> Envelope:
        return await self.request("GET", f"/jobs/{job_id}")

    async def create_job(self, payload: Union[JobCreate, Dict[str, Any]]) -> Envelope:
        job = validate_payload(JobCreate, payload)
        return await self.request("POST", "/jobs", json=job.model_dump(mode="json", exclude_none=True))

    async def update_job(self, job_id: str, data: Dict[str, Any]) -> Envelope:
        return await self.request("PUT", f"/jobs/{job_id}", json=data)

    async def delete_job(self, job_id: str) -> Envelope:
        return await self.request("DELETE", f"/jobs/{job_id}")

    async def close_job(self, job_id: str) -> Envelope:
        return await self.request("PUT", f"/jobs/{job_id}/close")

    async def get_company_jobs(self, status: Optional[str] = None) -> Envelope:
        return await self.request("GET", "/jobs/company/my-jobs", params={"status": status})

    # ==================== Applications ====================

    async def apply_for_job(self, payload: Union[ApplicationCreate, Dict[str, Any]]) -> Envelope:
        application = validate_payload(ApplicationCreate, payload)
        return await self.request(
            "POST", "/applications/apply", json=application.model_dump(mode="json", exclude_none=True)
        )

    async def get_my_applications(self) -> Envelope:
        return await self.request("GET", "/applications/my-applications")

    async def list_my_applications(self) -> List[ApplicationResponse]:
        return self._parse_list(await self.get_my_applications(), "applications", ApplicationResponse)

    async def get_company_applications(
        self,
        job_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Envelope:
        return await self.request(
            "GET", "/applications/company", params={"job_id": job_id, "status": status}
        )

    async def list_company_applications(
        self,
        job_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[ApplicationResponse]:
        envelope = await self.get_company_applications(job_id=job_id, status=status)
        return self._parse_list(envelope, "applications", ApplicationResponse)

    async def get_application(self, application_id: str) -> Envelope:
        return await self.request("GET", f"/applications/{application_id}")

    async def update_application_status(
        self,
        application_id: str,
        status: Any,
        note: Optional[str] = None,
    ) -> Envelope:
        body = {"status": validate_stage(JOB_POLICY, status), "notes": note}
        return await self.request("PUT", f"/applications/{application_id}/status", json=body)

    async def withdraw_application(self, application_id: str) -> Envelope:
        return await self.request("DELETE", f"/applications/{application_id}/withdraw")

    async def get_application_stats(self) -> Envelope:
        return await self.request("GET", "/applications/stats")

    # ==================== Dashboard ====================

    async def get_dashboard_stats(self) -> Envelope:
        return await self.request("GET", "/dashboard/stats")

    # ==================== Simulasi ====================

    async def get_simulasi_categories(self) -> Envelope:
        return await self.request("GET", "/simulasi/categories")

    async def submit_simulasi(self, payload: Union[SimulasiSubmit, Dict[str, Any]]) -> Envelope:
        submission = validate_payload(SimulasiSubmit, payload)
        return await self.request("POST", "/simulasi/submit", json=submission.model_dump(mode="json"))

    async def get_my_simulasi_results(self) -> Envelope:
        return await self.request("GET", "/simulasi/my-results")

    async def list_my_simulasi_results(self) -> List[SimulasiResultResponse]:
        envelope = await self.get_my_simulasi_results()
        return self._parse_list(envelope, "results", SimulasiResultResponse)

    async def get_simulasi_stats(self) -> Envelope:
        return await self.request("GET", "/simulasi/stats")

    async def get_all_simulasi_results(self) -> Envelope:
        return await self.request("GET", "/simulasi/results")

    async def get_leaderboards(self) -> Envelope:
        return await self.request("GET", "/simulasi/leaderboards")

    async def list_leaderboards(self) -> Dict[str, Leaderboard]:
        boards = self._extract(await self.get_leaderboards(), "leaderboards")
        return {category_id: Leaderboard.model_validate(board) for category_id, board in boards.items()}

    async def get_leaderboard(self, category_id: str, limit: Optional[int] = None) -> Envelope:
        return await self.request("GET", f"/simulasi/leaderboard/{category_id}", params={"limit": limit})

    async def fetch_leaderboard(self, category_id: str, limit: Optional[int] = None) -> Leaderboard:
        envelope = await self.get_leaderboard(category_id, limit)
        if not envelope.success:
            raise ApiError(envelope.message or "Leaderboard unavailable")
        return Leaderboard.model_validate(envelope.data)

    async def get_simulasi_result(self, result_id: str) -> Envelope:
        return await self.request("GET", f"/simulasi/result/{result_id}")

    # ==================== Internships ====================

    async def get_internships(self, **filters: Any) -> Envelope:
        return await self.request("GET", "/internships", params=filters)

    async def list_internships(self, **filters: Any) -> List[InternshipResponse]:
        envelope = await self.get_internships(**filters)
        return self._parse_list(envelope, "internships", InternshipResponse)

    async def get_internship(self, internship_id: str) -> Envelope:
        return await self.request("GET", f"/internships/{internship_id}")

    async def create_internship(self, payload: Union[InternshipCreate, Dict[str, Any]]) -> Envelope:
        internship = validate_payload(InternshipCreate, payload)
        return await self.request(
            "POST", "/internships", json=internship.model_dump(mode="json", exclude_none=True)
        )

    async def update_internship(self, internship_id: str, data: Dict[str, Any]) -> Envelope:
        return await self.request("PUT", f"/internships/{internship_id}", json=data)

    async def delete_internship(self, internship_id: str) -> Envelope:
        return await self.request("DELETE", f"/internships/{internship_id}")

    async def get_company_internships(self) -> Envelope:
        return await self.request("GET", "/internships/company/my-internships")

    # ==================== Internship applications ====================

    async def apply_for_internship(
        self,
        payload: Union[InternshipApplicationCreate, Dict[str, Any]],
    ) -> Envelope:
        application = validate_payload(InternshipApplicationCreate, payload)
        return await self.request(
            "POST",
            "/internship-applications/apply",
            json=application.model_dump(mode="json", exclude_none=True),
        )

    async def get_my_internship_applications(self) -> Envelope:
        return await self.request("GET", "/internship-applications/my-applications")

    async def get_company_internship_applications(
        self,
        internship_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Envelope:
        return await self.request(
            "GET",
            "/internship-applications/company",
            params={"internship_id": internship_id, "status": status},
        )

    async def list_company_internship_applications(
        self,
        internship_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[InternshipApplicationResponse]:
        envelope = await self.get_company_internship_applications(internship_id, status)
        return self._parse_list(envelope, "applications", InternshipApplicationResponse)

    async def get_internship_application_stats(self) -> Envelope:
        return await self.request("GET", "/internship-applications/company/stats")

    async def update_internship_application_status(
        self,
        application_id: str,
        status: Any,
        notes: Optional[str] = None,
        interview_schedule: Optional[str] = None,
    ) -> Envelope:
        body = {
            "status": validate_stage(INTERNSHIP_POLICY, status),
            "notes": notes,
            "interview_schedule": interview_schedule,
        }
        return await self.request(
            "PUT", f"/internship-applications/{application_id}/status", json=body
        )

    async def get_internship_application(self, application_id: str) -> Envelope:
        return await self.request("GET", f"/internship-applications/{application_id}")

    async def delete_internship_application(self, application_id: str) -> Envelope:
        return await self.request("DELETE", f"/internship-applications/{application_id}")
