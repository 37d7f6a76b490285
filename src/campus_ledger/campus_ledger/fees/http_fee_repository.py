"""Read invoices and installments from the remote data service over HTTP.

The base URL and timeout come from explicit settings; nothing here reads the
environment. Responses go through ``fees.schema`` before reaching the ledger.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import requests

from ..core.constants import DEFAULT_DATA_SERVICE_TIMEOUT
from ..core.exceptions import DataServiceError
from .model import Invoice, PaymentInstallment
from .repository import InstallmentReader, InvoiceReader
from .schema import installments_from_json, invoices_from_json

logger = logging.getLogger(__name__)


class DataServiceClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_DATA_SERVICE_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def get_json(self, path: str, *, params: Optional[dict] = None) -> Any:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.error("Data service request failed: GET %s: %s", url, e)
            raise DataServiceError(f"Data service request failed: {e}") from e
        except ValueError as e:
            logger.error("Data service returned invalid JSON for GET %s", url)
            raise DataServiceError("Data service returned invalid JSON") from e


def _unwrap(body: Any, key: str) -> list:
    """Accept both a bare JSON list and ``{"<key>": [...]}``."""
    if isinstance(body, list):
        return body
    if isinstance(body, dict) and isinstance(body.get(key), list):
        return body[key]
    logger.warning("Unexpected data service payload for %s: %s", key, type(body).__name__)
    return []


class HttpInvoiceReader(InvoiceReader):
    def __init__(self, client: DataServiceClient):
        self._client = client

    def list_for_student(self, student_id: str) -> Sequence[Invoice]:
        body = self._client.get_json("fees/invoices", params={"studentId": student_id})
        return invoices_from_json(_unwrap(body, "invoices"))


class HttpInstallmentReader(InstallmentReader):
    def __init__(self, client: DataServiceClient):
        self._client = client

    def list_for_student(self, student_id: str) -> Sequence[PaymentInstallment]:
        body = self._client.get_json(f"fees/students/{student_id}/installments")
        return installments_from_json(_unwrap(body, "paymentInstallments"))
