"""
Function declarations offered to Gemini on every turn.

Schemas use the proto type names (OBJECT, STRING, NUMBER) understood by
google.generativeai. Tag-valued fields are closed enums built from the
domain enums so the two can never drift apart.
"""

from typing import Any, Dict, List

from swiftloan.models.domain_models import AgentType, DocumentType, LoanStage

UPDATE_LOAN_STAGE = "updateLoanStage"
REQUEST_DOCUMENT = "requestDocument"
APPROVE_LOAN = "approveLoan"
REJECT_LOAN = "rejectLoan"


def get_loan_tools() -> List[Dict[str, Any]]:
    """Return the four tool schemas for the loan workflow."""
    return [
        {
            "name": UPDATE_LOAN_STAGE,
            "description": "Updates the current stage of the loan application process and sets the active agent.",
            "parameters": {
                "type": "OBJECT",
                "properties": {
                    "stage": {
                        "type": "STRING",
                        "enum": [s.value for s in LoanStage],
                        "description": "The new stage to move to.",
                    },
                    "agent": {
                        "type": "STRING",
                        "enum": [a.value for a in AgentType],
                        "description": "The name of the agent now handling the conversation.",
                    },
                    "statusMessage": {
                        "type": "STRING",
                        "description": "Short customer-facing description of the new stage.",
                    },
                },
                "required": ["stage", "agent", "statusMessage"],
            },
        },
        {
            "name": REQUEST_DOCUMENT,
            "description": "Requests the user to upload a specific document type.",
            "parameters": {
                "type": "OBJECT",
                "properties": {
                    "docType": {
                        "type": "STRING",
                        "enum": [d.value for d in DocumentType],
                        "description": "The type of document to request.",
                    },
                },
                "required": ["docType"],
            },
        },
        {
            "name": APPROVE_LOAN,
            "description": "Approves the loan and provides final details for the sanction letter.",
            "parameters": {
                "type": "OBJECT",
                "properties": {
                    "approvedAmount": {"type": "NUMBER", "description": "The final approved loan amount."},
                    "interestRate": {"type": "NUMBER", "description": "The interest rate percentage per annum."},
                    "tenureMonths": {"type": "NUMBER", "description": "The loan tenure in months."},
                    "applicantName": {"type": "STRING", "description": "The applicant's full name extracted from documents."},
                    "evidence": {"type": "STRING", "description": "The figures and checks the approval relied on."},
                    "purpose": {"type": "STRING", "description": "What the loan will be used for, if stated."},
                },
                "required": ["approvedAmount", "interestRate", "tenureMonths", "applicantName", "evidence"],
            },
        },
        {
            "name": REJECT_LOAN,
            "description": "Rejects the loan application.",
            "parameters": {
                "type": "OBJECT",
                "properties": {
                    "reason": {"type": "STRING", "description": "The reason for rejection."},
                    "evidence": {"type": "STRING", "description": "The figures and checks the rejection relied on."},
                },
                "required": ["reason", "evidence"],
            },
        },
    ]
