# swiftloan/services/pdf_service.py
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from pypdf import PdfReader, PdfWriter
from reportlab.lib.colors import Color
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from swiftloan.core.errors import SanctionLetterUnavailable
from swiftloan.models.domain_models import ApplicationRecord, LoanStatus

EMI_MARKUP = 1.1
DEFAULT_TENURE_MONTHS = 12

TERMS = [
    "1. This sanction is valid for 30 days from the date of issuance.",
    "2. Final disbursement is subject to signing of the loan agreement.",
    "3. The interest rate is fixed for the tenure of the loan.",
]

EMERALD = Color(16 / 255, 185 / 255, 129 / 255)


def estimate_monthly_installment(amount: Optional[float], tenure_months: Optional[int]) -> int:
    """Flat estimate shown on the letter: amount / tenure with a fixed markup."""
    tenure = tenure_months or DEFAULT_TENURE_MONTHS
    return round((amount or 0) / tenure * EMI_MARKUP)


def generate_sanction_pdf(output_path: str, record: ApplicationRecord, reference_id: str) -> str:
    if record.status != LoanStatus.APPROVED:
        raise SanctionLetterUnavailable(f"application is {record.status.value}, not approved")

    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    c = canvas.Canvas(str(out), pagesize=A4)
    width, height = A4
    margin = 56
    y = height - 60

    # Header
    c.setFont("Helvetica-Bold", 22)
    c.setFillColor(EMERALD)
    c.drawString(margin, y, "SwiftLoan NBFC")
    c.setFillColorRGB(0.4, 0.4, 0.4)
    c.setFont("Helvetica", 10)
    y -= 18
    c.drawString(margin, y, "123 Finance District, Fintech City, 400001")
    y -= 14
    c.drawString(margin, y, "support@swiftloan.ai | www.swiftloan.ai")
    y -= 20
    c.setStrokeColorRGB(0.8, 0.8, 0.8)
    c.line(margin, y, width - margin, y)

    y -= 36
    c.setFillColorRGB(0, 0, 0)
    c.setFont("Helvetica-Bold", 16)
    c.drawCentredString(width / 2, y, "LOAN SANCTION LETTER")

    y -= 36
    c.setFont("Helvetica", 12)
    c.drawString(margin, y, f"Date: {datetime.utcnow().strftime('%Y-%m-%d')}    Ref: {reference_id}")
    y -= 24
    c.drawString(margin, y, f"Dear {record.applicant_name or 'Applicant'},")
    y -= 20
    c.drawString(margin, y, "We are pleased to inform you that your personal loan application has been")
    y -= 16
    c.setFont("Helvetica-Bold", 12)
    c.setFillColor(EMERALD)
    c.drawString(margin, y, "APPROVED")
    c.setFont("Helvetica", 12)
    c.setFillColorRGB(0, 0, 0)
    c.drawString(margin + 68, y, "based on your credit profile and income verification.")

    # Sanction details
    y -= 36
    c.setFont("Helvetica-Bold", 14)
    c.drawString(margin, y, "Sanction Details:")
    y -= 24
    emi = estimate_monthly_installment(record.loan_amount, record.tenure_months)
    details = [
        ("Sanctioned Amount:", f"${(record.loan_amount or 0):,.0f}"),
        ("Interest Rate:", f"{record.interest_rate}% p.a."),
        ("Tenure:", f"{record.tenure_months} Months"),
        ("Monthly EMI (Est.):", f"${emi:,}"),
        ("Purpose:", f"{record.purpose or '--'}"),
    ]
    for label, value in details:
        c.setFont("Helvetica-Bold", 11)
        c.drawString(margin + 10, y, label)
        c.setFont("Helvetica", 11)
        c.drawString(margin + 160, y, value)
        y -= 20

    # Terms
    y -= 16
    c.setFont("Helvetica", 12)
    c.drawString(margin, y, "Terms & Conditions:")
    y -= 18
    c.setFont("Helvetica", 9)
    c.setFillColorRGB(0.3, 0.3, 0.3)
    for line in TERMS:
        c.drawString(margin, y, line)
        y -= 14

    y -= 40
    c.setFillColorRGB(0, 0, 0)
    c.setFont("Helvetica", 12)
    c.drawString(margin, y, "Authorized Signatory")
    y -= 20
    c.setFont("Courier-Oblique", 11)
    c.drawString(margin, y, "[ Digital Signature: SwiftLoan_Auto_Gen_AI_882 ]")

    c.showPage()
    c.save()
    return str(out)


def augment_pdf_with_pypdf(pdf_path: str, metadata: Dict[str, str]):
    reader = PdfReader(pdf_path)
    writer = PdfWriter()
    for p in reader.pages:
        writer.add_page(p)
    writer.add_metadata({f"/{k}": str(v) for k, v in metadata.items()})
    out_path = pdf_path.replace(".pdf", "_meta.pdf")
    with open(out_path, "wb") as f:
        writer.write(f)
    os.replace(out_path, pdf_path)
    return pdf_path
