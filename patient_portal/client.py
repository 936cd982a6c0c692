"""HTTP client for the booking API used by the Streamlit front-ends."""

from typing import Any, Optional

import httpx

from config import get_settings


class ApiError(Exception):
    """An error response from the booking API."""

    def __init__(self, status_code: int, code: str, detail: str, payload: Optional[dict] = None):
        super().__init__(detail)
        self.status_code = status_code
        self.code = code
        self.detail = detail
        self.payload = payload or {}

    @property
    def fields(self) -> list[str]:
        return self.payload.get("fields", [])


class BookingApiClient:
    """Thin wrapper over the /v1 endpoints."""

    def __init__(
        self,
        token: str,
        base_url: Optional[str] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        self.token = token
        self.http = http or httpx.Client(
            base_url=base_url or get_settings().api_base_url, timeout=timeout
        )

    # Workflow

    def open_workflow(self) -> dict:
        return self._request("POST", "/v1/workflows")

    def list_workflows(self) -> list[dict]:
        return self._request("GET", "/v1/workflows")

    def get_workflow(self, workflow_id: str) -> dict:
        return self._request("GET", f"/v1/workflows/{workflow_id}")

    def cancel_workflow(self, workflow_id: str) -> dict:
        return self._request("DELETE", f"/v1/workflows/{workflow_id}")

    def update_appointment(self, workflow_id: str, **fields: str) -> dict:
        return self._request(
            "POST", f"/v1/workflows/{workflow_id}/appointment", json={"fields": fields}
        )

    def advance(self, workflow_id: str) -> dict:
        return self._request("POST", f"/v1/workflows/{workflow_id}/advance")

    def back(self, workflow_id: str) -> dict:
        return self._request("POST", f"/v1/workflows/{workflow_id}/back")

    def reading_passage(self) -> dict:
        return self._request("GET", "/v1/workflows/passage")

    # Recording

    def start_recording(self, workflow_id: str, permission_granted: bool = True) -> dict:
        return self._request(
            "POST",
            f"/v1/workflows/{workflow_id}/recording/start",
            json={"permission_granted": permission_granted},
        )

    def pause_recording(self, workflow_id: str) -> dict:
        return self._request("POST", f"/v1/workflows/{workflow_id}/recording/pause")

    def resume_recording(self, workflow_id: str) -> dict:
        return self._request("POST", f"/v1/workflows/{workflow_id}/recording/resume")

    def stop_recording(self, workflow_id: str) -> dict:
        return self._request("POST", f"/v1/workflows/{workflow_id}/recording/stop")

    def re_record(self, workflow_id: str) -> dict:
        return self._request("POST", f"/v1/workflows/{workflow_id}/recording/re-record")

    def upload_audio(self, workflow_id: str, data: bytes) -> dict:
        return self._request(
            "POST",
            f"/v1/workflows/{workflow_id}/recording/chunks",
            content=data,
            headers={"Content-Type": "application/octet-stream"},
        )

    def recording_audio(self, workflow_id: str) -> bytes:
        response = self._send("GET", f"/v1/workflows/{workflow_id}/recording/audio")
        return response.content

    # Analysis and submission

    def analyze(self, workflow_id: str) -> dict:
        return self._request("POST", f"/v1/workflows/{workflow_id}/analysis")

    def submit(self, workflow_id: str) -> dict:
        return self._request("POST", f"/v1/workflows/{workflow_id}/submit")

    # Directory and bookings

    def list_doctors(self) -> list[dict]:
        return self._request("GET", "/v1/doctors")

    def my_bookings(self) -> list[dict]:
        return self._request("GET", "/v1/bookings/mine")

    def list_bookings(self, status: Optional[str] = None) -> list[dict]:
        params = {"status": status} if status else None
        return self._request("GET", "/v1/bookings", params=params)

    def booking_counts(self) -> dict:
        return self._request("GET", "/v1/bookings/stats/counts")

    def update_booking_status(
        self, booking_id: str, status: str, notes: Optional[str] = None
    ) -> dict:
        return self._request(
            "POST",
            f"/v1/bookings/{booking_id}/status",
            json={"status": status, "notes": notes},
        )

    # Internal helpers

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        return self._send(method, url, **kwargs).json()

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = kwargs.pop("headers", {})
        headers["Authorization"] = f"Bearer {self.token}"
        response = self.http.request(method, url, headers=headers, **kwargs)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise _api_error(response) from e
        return response


def _api_error(response: httpx.Response) -> ApiError:
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}
    detail = payload.get("detail") or response.text or response.reason_phrase
    if not isinstance(detail, str):
        detail = str(detail)
    return ApiError(
        status_code=response.status_code,
        code=payload.get("error", "http_error"),
        detail=detail,
        payload=payload,
    )
