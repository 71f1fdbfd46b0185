"""Static template catalog.

Each entry maps a template id to its display metadata and the ordered list of
form fields the user fills before generation. Consumed read-only.
"""

from backend.app.models.common import DocType
from backend.app.models.templates import DocConfig, FormField

DOCUMENT_CONFIGS: dict[str, DocConfig] = {
    "resignation": DocConfig(
        id="resignation",
        type=DocType.RESIGNATION,
        title="Professional Resignation",
        description="A resignation letter that keeps your reputation safe.",
        icon="📄",
        fields=(
            FormField(name="name", label="Your Full Name", required=True),
            FormField(name="company", label="Company Name", required=True),
            FormField(name="title", label="Your Designation", required=True),
            FormField(name="lastDay", label="Your Last Working Day", type="date", required=True),
            FormField(name="reason", label="Reason for leaving (Optional)", type="textarea"),
        ),
    ),
    "bank": DocConfig(
        id="bank",
        type=DocType.BANK_COMPLAINT,
        title="Bank Communication",
        description="Correct standard formats to resolve banking issues.",
        icon="🏦",
        fields=(
            FormField(name="name", label="Account Holder Name", required=True),
            FormField(name="bankName", label="Bank & Branch Name", required=True),
            FormField(name="accNumber", label="Account or Card Number", required=True),
            FormField(
                name="issue", label="Describe your problem clearly", type="textarea", required=True
            ),
        ),
    ),
    "police": DocConfig(
        id="police",
        type=DocType.POLICE_COMPLAINT,
        title="Police Intimation",
        description="Clear, formal drafts for reporting incidents.",
        icon="🚓",
        fields=(
            FormField(name="name", label="Your Full Name", required=True),
            FormField(name="address", label="Your Address", type="textarea", required=True),
            FormField(
                name="incidentType", label="What was lost or what happened?", required=True
            ),
            FormField(name="date", label="Date and Time of incident", type="date", required=True),
            FormField(
                name="description", label="Incident details", type="textarea", required=True
            ),
        ),
    ),
    "college": DocConfig(
        id="college",
        type=DocType.COLLEGE_APP,
        title="Academic Application",
        description="Professional applications that get approved.",
        icon="🎓",
        fields=(
            FormField(name="name", label="Student Name", required=True),
            FormField(name="course", label="Course & Roll Number", required=True),
            FormField(name="previousCollege", label="College/School Name", required=True),
            FormField(name="achievement", label="Reason or Achievement", type="textarea"),
        ),
    ),
    "apology": DocConfig(
        id="apology",
        type=DocType.OFFICE_APOLOGY,
        title="Workplace Apology",
        description="A respectful way to address workplace mistakes.",
        icon="🤝",
        fields=(
            FormField(name="name", label="Your Name", required=True),
            FormField(name="manager", label="Manager Name/Role", required=True),
            FormField(name="mistake", label="What happened?", type="textarea", required=True),
            FormField(name="action", label="How will you fix it?", type="textarea"),
        ),
    ),
    "leave": DocConfig(
        id="leave",
        type=DocType.LEAVE_LETTER,
        title="Leave Application",
        description="Polite requests that managers can't say no to.",
        icon="🗓️",
        fields=(
            FormField(name="name", label="Your Name", required=True),
            FormField(name="type", label="Type (Sick/Family/Vacation)", required=True),
            FormField(name="startDate", label="Leave Start Date", type="date", required=True),
            FormField(name="endDate", label="Leave End Date", type="date", required=True),
            FormField(name="reason", label="Reason for Leave", type="textarea", required=True),
        ),
    ),
}


def get_template(template_id: str) -> DocConfig:
    """Look up a template by id.

    Raises:
        KeyError: If the id is not in the catalog
    """
    return DOCUMENT_CONFIGS[template_id]


def list_templates() -> list[DocConfig]:
    """All templates in catalog order."""
    return list(DOCUMENT_CONFIGS.values())


def template_for_type(doc_type: DocType) -> DocConfig | None:
    """Find the template that produces the given document type."""
    for config in DOCUMENT_CONFIGS.values():
        if config.type == doc_type:
            return config
    return None
