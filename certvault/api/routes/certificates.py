"""Certificate Routes — list, create and delete vault records.

Invariants:
    - Every mutation goes through VaultController (durability before visibility)
    - Form fields are validated by the controller, so missing name/expiry_date
      yields the same VALIDATION_ERROR envelope as any other caller would see
    - An empty file input (no filename) is treated as "no attachment"
    - DELETE of an unknown id succeeds (idempotent store delete)

Design Decisions:
    - Multipart form over JSON: the image is uploaded alongside the fields
      and UploadFile is read by the attachment encoder without buffering twice
    - refresh=true on GET re-reads the store (recovers from a failed startup load)
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status

from certvault.core.domain_types import Certificate, CertificateId
from certvault.schemas.certificate import (
    CertificateListResponse, CertificateResponse, VaultStatsResponse,
)
from certvault.services.vault_controller import VaultController, get_vault

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/certificates", tags=["certificates"])


def _to_response(vault: VaultController, certificate: Certificate) -> CertificateResponse:
    now = vault.now()
    return CertificateResponse.from_domain(
        certificate,
        status=vault.classify(certificate.expiry_date, now),
        days_remaining=vault.days_remaining(certificate.expiry_date, now),
    )


@router.get("", response_model=CertificateListResponse)
async def list_certificates(
    refresh: bool = Query(False),
    vault: VaultController = Depends(get_vault),
):
    """List the vault in insertion order with derived statuses and counts."""
    if refresh:
        await vault.load_all()
    return CertificateListResponse(
        certificates=[_to_response(vault, c) for c in vault.certificates],
        stats=VaultStatsResponse(**vault.stats()),
        store_available=vault.state.load_error is None,
    )


@router.get("/stats", response_model=VaultStatsResponse)
async def get_stats(vault: VaultController = Depends(get_vault)):
    """Dashboard counts: total, active, expired."""
    return VaultStatsResponse(**vault.stats())


@router.post(
    "", response_model=CertificateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_certificate(
    name: str = Form(""),
    issuer: str = Form(""),
    expiry_date: str = Form(""),
    image: UploadFile | None = File(None),
    vault: VaultController = Depends(get_vault),
):
    """Secure a new certificate to the vault."""
    attachment = image if image is not None and image.filename else None
    certificate = await vault.create(
        {"name": name, "issuer": issuer, "expiry_date": expiry_date},
        attachment,
    )
    logger.info(
        "Certificate created",
        extra={"certificate_id": certificate.id, "operation": "create"},
    )
    return _to_response(vault, certificate)


@router.delete(
    "/{certificate_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_certificate(
    certificate_id: str, vault: VaultController = Depends(get_vault),
):
    """Remove a certificate. The list changes only after the store confirms."""
    await vault.remove(CertificateId(certificate_id))
