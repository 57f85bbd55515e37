"""Batch video emotion client: submit a media URL, poll the job, parse the report."""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Callable, Dict, Optional

import requests

from .config import VideoConfig
from .errors import AnalysisError, AnalysisErrorKind
from .schemas import MultimodalEmotionReport

logger = logging.getLogger(__name__)

SERVICE = "Hume API"
PENDING_STATES = {"QUEUED", "IN_PROGRESS"}


def _first_emotions(model: Any) -> Optional[list]:
    # models.<channel>.grouped_predictions[0].predictions[0].emotions
    try:
        return model["grouped_predictions"][0]["predictions"][0]["emotions"]
    except (KeyError, IndexError, TypeError):
        return None


def parse_job_report(payload: Dict[str, Any]) -> MultimodalEmotionReport:
    """Pull the face and prosody emotion lists out of a completed job."""
    predictions = payload.get("predictions") or []
    if not isinstance(predictions, list):
        raise AnalysisError(AnalysisErrorKind.MALFORMED, "Job predictions are not a list")
    if not predictions:
        return MultimodalEmotionReport()

    first = predictions[0]
    if not isinstance(first, dict):
        raise AnalysisError(AnalysisErrorKind.MALFORMED, "Job prediction is not an object")
    models = first.get("models") or {}
    if not isinstance(models, dict):
        raise AnalysisError(AnalysisErrorKind.MALFORMED, "Job prediction models are not an object")
    raw: Dict[str, Any] = {}
    for channel in ("face", "prosody"):
        emotions = _first_emotions(models.get(channel))
        if emotions is not None:
            raw[channel] = {"emotions": emotions}
    return MultimodalEmotionReport.from_dict(raw)


def _job_status(payload: Dict[str, Any]) -> str:
    status = payload.get("status")
    if status is None and isinstance(payload.get("state"), dict):
        status = payload["state"].get("status")
    return str(status or "").upper()


class VideoEmotionAnalyzer:
    """Talks to the batch expression-measurement REST API."""

    def __init__(
        self,
        config: VideoConfig,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.api_key = api_key or os.getenv("HUME_API_KEY")
        self.session = session or requests.Session()
        self.sleep = sleep
        if not self.api_key:
            logger.warning("HUME_API_KEY is not set; video analysis will fail until it is configured")

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        if not self.api_key:
            raise AnalysisError(AnalysisErrorKind.CONFIGURATION, "Hume API key is not configured")

        url = f"{self.config.base_url.rstrip('/')}{path}"
        headers = {"X-Hume-Api-Key": self.api_key}
        try:
            resp = self.session.request(
                method,
                url,
                headers=headers,
                timeout=self.config.request_timeout_seconds,
                **kwargs,
            )
        except requests.Timeout as exc:
            raise AnalysisError(AnalysisErrorKind.TIMEOUT, f"Request to {SERVICE} timed out", exc) from exc
        except requests.ConnectionError as exc:
            raise AnalysisError(
                AnalysisErrorKind.CONNECTIVITY, f"Network error while connecting to {SERVICE}", exc
            ) from exc
        except requests.RequestException as exc:
            raise AnalysisError(AnalysisErrorKind.SERVICE, f"Request to {SERVICE} failed", exc) from exc

        if resp.status_code in (401, 403):
            raise AnalysisError(AnalysisErrorKind.AUTHORIZATION, f"{SERVICE} rejected the API key")
        if resp.status_code >= 400:
            raise AnalysisError(
                AnalysisErrorKind.SERVICE,
                f"{SERVICE} returned {resp.status_code}: {resp.text[:200]}",
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise AnalysisError(AnalysisErrorKind.MALFORMED, f"{SERVICE} returned invalid JSON", exc) from exc
        if not isinstance(data, dict):
            raise AnalysisError(AnalysisErrorKind.MALFORMED, f"{SERVICE} returned an unexpected payload")
        return data

    def submit_job(self, media_url: str) -> str:
        """Start a face + prosody job for ``media_url`` and return its id."""
        data = self._request(
            "POST",
            "/batch/jobs",
            json={"urls": [media_url], "models": {"face": {}, "prosody": {}}},
        )
        job_id = data.get("job_id")
        if not job_id:
            raise AnalysisError(AnalysisErrorKind.MALFORMED, f"{SERVICE} response missing job_id")
        logger.info("Submitted video emotion job %s", job_id)
        return str(job_id)

    def fetch_job(self, job_id: str) -> Optional[MultimodalEmotionReport]:
        """Return the report if the job finished, None while it is still running."""
        data = self._request("GET", f"/batch/jobs/{job_id}")
        status = _job_status(data)
        if status == "COMPLETED":
            return parse_job_report(data)
        if status == "FAILED":
            raise AnalysisError(
                AnalysisErrorKind.SERVICE,
                f"Video emotion job {job_id} failed: {data.get('error') or 'unknown error'}",
            )
        if status not in PENDING_STATES:
            raise AnalysisError(AnalysisErrorKind.MALFORMED, f"Unknown job status: {status or '<missing>'}")
        return None

    def wait_for_report(self, job_id: str) -> MultimodalEmotionReport:
        for attempt in range(1, self.config.max_poll_attempts + 1):
            report = self.fetch_job(job_id)
            if report is not None:
                return report
            logger.debug("Job %s still running (poll %d)", job_id, attempt)
            if attempt < self.config.max_poll_attempts:
                self.sleep(self.config.poll_interval_seconds)
        raise AnalysisError(
            AnalysisErrorKind.TIMEOUT,
            f"Video emotion job {job_id} did not finish after {self.config.max_poll_attempts} polls",
        )

    def analyze(self, media_url: str) -> MultimodalEmotionReport:
        return self.wait_for_report(self.submit_job(media_url))
