import logging
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    HRFlowable,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

logger = logging.getLogger(__name__)

PRIMARY_COLOR = colors.HexColor("#1E3A8A")  # Navy
ACCENT_COLOR = colors.HexColor("#B8860B")  # Gold
TEXT_PRIMARY = colors.HexColor("#1F2937")  # Dark Gray
TEXT_SECONDARY = colors.HexColor("#6B7280")  # Medium Gray


def create_certificate_styles():
    """Create certificate PDF styles"""
    styles = getSampleStyleSheet()

    styles.add(
        ParagraphStyle(
            name="CertTitle",
            parent=styles["Title"],
            fontSize=34,
            textColor=PRIMARY_COLOR,
            fontName="Helvetica-Bold",
            leading=40,
            spaceAfter=6,
            alignment=TA_CENTER,
        )
    )

    styles.add(
        ParagraphStyle(
            name="CertCaption",
            parent=styles["Normal"],
            fontSize=13,
            textColor=TEXT_SECONDARY,
            fontName="Helvetica",
            leading=17,
            spaceAfter=10,
            alignment=TA_CENTER,
        )
    )

    styles.add(
        ParagraphStyle(
            name="Recipient",
            parent=styles["Normal"],
            fontSize=28,
            textColor=TEXT_PRIMARY,
            fontName="Helvetica-BoldOblique",
            leading=34,
            spaceAfter=10,
            alignment=TA_CENTER,
        )
    )

    styles.add(
        ParagraphStyle(
            name="CourseTitle",
            parent=styles["Normal"],
            fontSize=18,
            textColor=PRIMARY_COLOR,
            fontName="Helvetica-Bold",
            leading=22,
            spaceAfter=6,
            alignment=TA_CENTER,
        )
    )

    styles.add(
        ParagraphStyle(
            name="DetailCell",
            parent=styles["Normal"],
            fontSize=10,
            textColor=TEXT_PRIMARY,
            fontName="Helvetica",
            alignment=TA_CENTER,
            leading=13,
        )
    )

    return styles


def draw_certificate_border(canvas, doc):
    """Double frame around the page plus the verification footer"""
    canvas.saveState()

    width, height = landscape(A4)

    canvas.setStrokeColor(PRIMARY_COLOR)
    canvas.setLineWidth(6)
    canvas.rect(18, 18, width - 36, height - 36, fill=0, stroke=1)

    canvas.setStrokeColor(ACCENT_COLOR)
    canvas.setLineWidth(1.5)
    canvas.rect(30, 30, width - 60, height - 60, fill=0, stroke=1)

    canvas.setFont("Helvetica", 8)
    canvas.setFillColor(TEXT_SECONDARY)
    canvas.drawCentredString(width / 2, 40, doc.verification_footer)

    canvas.restoreState()


def _format_date(value) -> str:
    return value.strftime("%B %d, %Y") if value else "-"


def render_certificate_pdf(certificate, verify_url: str) -> bytes:
    """Render a certificate record to PDF bytes"""
    styles = create_certificate_styles()
    story = []

    story.append(Spacer(1, 0.35 * inch))
    story.append(Paragraph("<b>Certificate of Completion</b>", styles["CertTitle"]))
    story.append(
        Paragraph(certificate.primary_issuing_authority or "", styles["CertCaption"])
    )
    story.append(
        HRFlowable(
            width="60%",
            thickness=1.5,
            color=ACCENT_COLOR,
            spaceBefore=4,
            spaceAfter=16,
        )
    )

    story.append(Paragraph("This certifies that", styles["CertCaption"]))
    story.append(Paragraph(certificate.recipient_name, styles["Recipient"]))
    story.append(
        Paragraph("has successfully completed the course", styles["CertCaption"])
    )
    story.append(Paragraph(certificate.course_title, styles["CourseTitle"]))
    if certificate.delivery_method:
        story.append(Paragraph(certificate.delivery_method, styles["CertCaption"]))

    story.append(Spacer(1, 14))

    details = [
        ["Completion Date", "Grade", "Total Hours", "Instructor"],
        [
            _format_date(certificate.completion_date),
            certificate.grade,
            str(certificate.total_hours or "-"),
            certificate.primary_instructor_name or "-",
        ],
    ]
    details = [
        [Paragraph(str(cell), styles["DetailCell"]) for cell in row] for row in details
    ]
    table = Table(details, colWidths=[150, 100, 100, 200])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#EFF6FF")),
                ("LINEBELOW", (0, 0), (-1, 0), 1, PRIMARY_COLOR),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("TOPPADDING", (0, 0), (-1, -1), 6),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    story.append(table)

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=50,
        leftMargin=50,
        topMargin=45,
        bottomMargin=55,
        title=f"Certificate {certificate.certificate_id}",
    )
    doc.verification_footer = (
        f"Certificate ID: {certificate.certificate_id}   "
        f"Verification Code: {certificate.verification_code}   "
        f"Verify at: {verify_url}"
    )
    doc.build(
        story,
        onFirstPage=draw_certificate_border,
        onLaterPages=draw_certificate_border,
    )

    logger.info(f"Rendered PDF for certificate {certificate.certificate_id}")
    return buffer.getvalue()
