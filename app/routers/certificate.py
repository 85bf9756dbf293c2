# app/routers/certificate.py
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.core.limiter import limiter
from app.models.user import User
from app.schemas.certificate import (
    CertificateIssueRequest,
    CertificateIssueResponse,
    CertificateResponse,
    CertificateVerificationResponse,
    EligibilityResponse,
    MyCertificatesResponse,
)
from app.services.certificate import CertificateService, verify_url_for
from app.utils.certificate_pdf_generator import render_certificate_pdf

router = APIRouter(
    prefix="/certificates",
    tags=["Certificates"],
    responses={404: {"description": "Not found"}},
)

CurrentUser = Annotated[User, Depends(get_current_user)]


@router.post("/issue", response_model=CertificateIssueResponse)
def issue_certificate(
    data: CertificateIssueRequest,
    current_user: CurrentUser,
    db: Session = Depends(get_db),
):
    """
    Issue a certificate for a completed course.
    Returns the existing certificate when one was already issued.
    """
    certificate, created = CertificateService(db).issue_certificate(
        current_user, data.course_id, data.course_type
    )
    return {
        "success": True,
        "message": (
            "Certificate issued successfully" if created else "Certificate already exists"
        ),
        "certificate": certificate,
    }


@router.get("/eligibility", response_model=EligibilityResponse)
def check_eligibility(
    current_user: CurrentUser,
    course_id: int = Query(..., alias="courseId", gt=0),
    course_type: str = Query(..., alias="courseType"),
    db: Session = Depends(get_db),
):
    return CertificateService(db).check_eligibility(
        current_user, course_id, course_type
    )


@router.get("/my", response_model=MyCertificatesResponse)
def get_my_certificates(current_user: CurrentUser, db: Session = Depends(get_db)):
    return CertificateService(db).get_user_certificates(current_user)


@router.get("/view/{certificate_id}", response_model=CertificateResponse)
def view_certificate(
    certificate_id: str, current_user: CurrentUser, db: Session = Depends(get_db)
):
    return CertificateService(db).record_download(current_user, certificate_id)


@router.get("/download/{certificate_id}")
def download_certificate(
    certificate_id: str, current_user: CurrentUser, db: Session = Depends(get_db)
):
    certificate = CertificateService(db).record_download(current_user, certificate_id)
    pdf_bytes = render_certificate_pdf(
        certificate, verify_url_for(certificate.verification_code)
    )
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{certificate.certificate_id}.pdf"'
        },
    )


@router.get(
    "/verify/{verification_code}", response_model=CertificateVerificationResponse
)
@limiter.limit(settings.verify_rate_limit)
def verify_certificate(
    request: Request, verification_code: str, db: Session = Depends(get_db)
):
    """Public certificate verification by code"""
    return CertificateService(db).verify_certificate(verification_code)
