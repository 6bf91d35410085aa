"""Document requirements per workflow stage and their evaluation.

Pure domain logic with no external dependencies. Documents are any objects
exposing ``category``, ``file_name``, ``file_size`` (bytes) and ``status``.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from stagegate.domain.checks import CheckCategory, CheckStatus, PrerequisiteCheck


@dataclass(frozen=True)
class DocumentRequirement:
    """A document category the project must carry to enter a stage."""

    category: str
    name: str
    description: str = ""
    required: bool = True
    min_count: int = 1
    file_types: tuple[str, ...] = ()  # allowed extensions, empty = any
    max_size_mb: float | None = None


class RequirementState(StrEnum):
    SATISFIED = "satisfied"
    MISSING = "missing"
    INVALID = "invalid"


@dataclass(frozen=True)
class RequirementStatus:
    requirement: DocumentRequirement
    state: RequirementState
    matched: int
    reason: str | None = None


@dataclass(frozen=True)
class InvalidRequirement:
    requirement: DocumentRequirement
    reason: str


@dataclass
class DocumentSummary:
    """Counts over required requirements only."""

    total_required: int = 0
    satisfied: int = 0
    missing: int = 0
    invalid: int = 0


@dataclass
class DocumentValidationResult:
    summary: DocumentSummary = field(default_factory=DocumentSummary)
    missing: list[DocumentRequirement] = field(default_factory=list)
    invalid: list[InvalidRequirement] = field(default_factory=list)
    requirements: list[RequirementStatus] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.summary.missing == 0 and self.summary.invalid == 0


@dataclass
class DocumentGate:
    """Answer to "can this project advance, as far as documents go?"."""

    can_advance: bool
    blockers: list[str]
    warnings: list[str]
    validation: DocumentValidationResult


@dataclass
class StageDocumentStatus:
    """Document status of a project against one stage."""

    stage_id: object
    stage_name: str
    requirements: tuple[DocumentRequirement, ...]
    validation: DocumentValidationResult
    completion_percentage: int


# Keyed by stage slug; stages not listed have no document requirements
STAGE_DOCUMENT_REQUIREMENTS: dict[str, tuple[DocumentRequirement, ...]] = {
    "inquiry_received": (
        DocumentRequirement(
            "rfq",
            "RFQ Document",
            "Customer request for quotation or inquiry document",
            file_types=("pdf", "doc", "docx", "txt"),
            max_size_mb=10,
        ),
        DocumentRequirement(
            "specification",
            "Technical Specifications",
            "Technical requirements and specifications",
            required=False,
            file_types=("pdf", "doc", "docx"),
            max_size_mb=20,
        ),
    ),
    "technical_review": (
        DocumentRequirement(
            "rfq",
            "RFQ Document",
            "Customer request for quotation under review",
            file_types=("pdf", "doc", "docx", "txt"),
            max_size_mb=10,
        ),
        DocumentRequirement(
            "drawing",
            "Technical Drawings",
            "CAD drawings, blueprints or technical diagrams",
            file_types=("dwg", "pdf", "step", "iges", "stp"),
            max_size_mb=50,
        ),
        DocumentRequirement(
            "bom",
            "Bill of Materials",
            "Detailed bill of materials",
            file_types=("xlsx", "csv", "pdf"),
            max_size_mb=5,
        ),
    ),
    "supplier_rfq_sent": (
        DocumentRequirement(
            "bom",
            "Bill of Materials",
            "Finalized bill of materials for supplier quoting",
            file_types=("xlsx", "csv", "pdf"),
            max_size_mb=5,
        ),
        DocumentRequirement(
            "rfq_package",
            "RFQ Package",
            "Complete RFQ package sent to suppliers",
            required=False,
            file_types=("pdf", "zip"),
            max_size_mb=100,
        ),
    ),
    "quoted": (
        DocumentRequirement(
            "quote",
            "Customer Quote",
            "Generated quote document for the customer",
            file_types=("pdf", "doc", "docx"),
            max_size_mb=10,
        ),
        DocumentRequirement(
            "supplier_quote",
            "Supplier Quotes",
            "Received supplier quotations",
            required=False,
            file_types=("pdf", "xlsx", "doc"),
            max_size_mb=20,
        ),
    ),
    "order_confirmed": (
        DocumentRequirement(
            "purchase_order",
            "Purchase Order",
            "Customer purchase order",
            file_types=("pdf", "doc", "docx"),
            max_size_mb=10,
        ),
        DocumentRequirement(
            "contract",
            "Contract/Agreement",
            "Signed contract or service agreement",
            required=False,
            file_types=("pdf",),
            max_size_mb=20,
        ),
    ),
    "procurement_planning": (
        DocumentRequirement(
            "procurement_plan",
            "Procurement Plan",
            "Material procurement and sourcing plan",
            required=False,
            file_types=("xlsx", "pdf", "doc"),
            max_size_mb=10,
        ),
        DocumentRequirement(
            "supplier_po",
            "Supplier Purchase Orders",
            "Purchase orders sent to suppliers",
            required=False,
            file_types=("pdf", "doc"),
            max_size_mb=50,
        ),
    ),
    "production": (
        DocumentRequirement(
            "work_order",
            "Work Order",
            "Production work order and instructions",
            file_types=("pdf", "doc", "docx"),
            max_size_mb=20,
        ),
        DocumentRequirement(
            "quality_plan",
            "Quality Control Plan",
            "Quality control and inspection procedures",
            required=False,
            file_types=("pdf", "doc", "xlsx"),
            max_size_mb=15,
        ),
    ),
    "completed": (
        DocumentRequirement(
            "shipping_document",
            "Shipping Documents",
            "Shipping labels, packing lists and delivery documentation",
            file_types=("pdf", "doc"),
            max_size_mb=10,
        ),
        DocumentRequirement(
            "delivery_confirmation",
            "Delivery Confirmation",
            "Proof of delivery and customer acceptance",
            required=False,
            file_types=("pdf", "jpg", "png"),
            max_size_mb=5,
        ),
    ),
}

DOCUMENT_GROUPS: dict[str, str] = {
    "rfq": "Customer Documents",
    "specification": "Technical Documents",
    "drawing": "Technical Documents",
    "bom": "Technical Documents",
    "rfq_package": "Supplier Documents",
    "supplier_quote": "Supplier Documents",
    "supplier_po": "Supplier Documents",
    "quote": "Commercial Documents",
    "purchase_order": "Commercial Documents",
    "procurement_plan": "Commercial Documents",
    "contract": "Legal Documents",
    "work_order": "Production Documents",
    "quality_plan": "Quality Documents",
    "shipping_document": "Logistics Documents",
    "delivery_confirmation": "Logistics Documents",
}

OTHER_GROUP = "Other Documents"


def get_stage_requirements(slug: str) -> tuple[DocumentRequirement, ...]:
    return STAGE_DOCUMENT_REQUIREMENTS.get(slug, ())


def group_requirements(requirements: Iterable[DocumentRequirement]) -> dict[str, list[DocumentRequirement]]:
    groups: dict[str, list[DocumentRequirement]] = {}
    for req in requirements:
        groups.setdefault(DOCUMENT_GROUPS.get(req.category, OTHER_GROUP), []).append(req)
    return groups


def document_issues(document, requirement: DocumentRequirement) -> list[str]:
    """File-type and size problems of one document against a requirement."""
    issues = []
    if requirement.file_types:
        name = document.file_name or ""
        extension = name.rsplit(".", 1)[-1].lower() if "." in name else ""
        if extension not in requirement.file_types:
            issues.append(f"invalid file type (expected {', '.join(requirement.file_types)})")
    if requirement.max_size_mb and document.file_size:
        size_mb = document.file_size / (1024 * 1024)
        if size_mb > requirement.max_size_mb:
            issues.append(f"file too large (max {requirement.max_size_mb:g}MB)")
    return issues


def _is_active(document) -> bool:
    return (getattr(document, "status", None) or "active") == "active"


def evaluate_documents(requirements: Iterable[DocumentRequirement], documents: Iterable) -> DocumentValidationResult:
    """Evaluate each requirement against the project's documents.

    Pure function -- no side effects, no DB access.

    Rules:
        - Only active documents count; matching is by category
        - No match: missing (optional requirements are listed but not counted)
        - Fewer matches than min_count: invalid, "insufficient count"
        - Enough matches but fewer than min_count passing the file rules: invalid
        - More matches than min_count: advisory warning
        - A requirement is never both missing and invalid
    """
    documents = [d for d in documents if _is_active(d)]
    result = DocumentValidationResult()

    for req in requirements:
        if req.required:
            result.summary.total_required += 1

        matching = [d for d in documents if d.category == req.category]
        count = len(matching)

        if count == 0:
            status = RequirementStatus(req, RequirementState.MISSING, 0)
            result.missing.append(req)
            if req.required:
                result.summary.missing += 1
        elif count < req.min_count:
            reason = f"insufficient count (have {count}, need {req.min_count})"
            status = RequirementStatus(req, RequirementState.INVALID, count, reason)
        else:
            issues: list[str] = []
            valid = 0
            for doc in matching:
                doc_issues = document_issues(doc, req)
                if doc_issues:
                    issues.extend(i for i in doc_issues if i not in issues)
                else:
                    valid += 1
            if valid < req.min_count:
                status = RequirementStatus(req, RequirementState.INVALID, count, "; ".join(issues))
            else:
                status = RequirementStatus(req, RequirementState.SATISFIED, count)
                if req.required:
                    result.summary.satisfied += 1
            if count > req.min_count:
                result.warnings.append(f"Multiple {req.name} documents found - ensure the correct version is used")

        if status.state == RequirementState.INVALID:
            result.invalid.append(InvalidRequirement(req, status.reason))
            if req.required:
                result.summary.invalid += 1

        result.requirements.append(status)

    return result


def derive_document_gate(validation: DocumentValidationResult) -> DocumentGate:
    blockers: list[str] = []
    warnings: list[str] = []

    for req in validation.missing:
        if req.required:
            blockers.append(f"Missing required document: {req.name}")
        else:
            warnings.append(f"Missing recommended document: {req.name}")

    for item in validation.invalid:
        if item.requirement.required:
            blockers.append(f"Invalid {item.requirement.name}: {item.reason}")
        else:
            warnings.append(f"Issues with {item.requirement.name}: {item.reason}")

    warnings.extend(validation.warnings)
    return DocumentGate(
        can_advance=not blockers,
        blockers=blockers,
        warnings=warnings,
        validation=validation,
    )


def completion_percentage(validation: DocumentValidationResult) -> int:
    """Share of required requirements satisfied; 100 when nothing is required."""
    if validation.summary.total_required == 0:
        return 100
    return round(validation.summary.satisfied / validation.summary.total_required * 100)


def document_checks(validation: DocumentValidationResult) -> list[PrerequisiteCheck]:
    """One prerequisite check per requirement."""
    checks = []
    for status in validation.requirements:
        req = status.requirement
        if status.state == RequirementState.SATISFIED:
            check_status, details = CheckStatus.PASSED, None
        elif status.state == RequirementState.MISSING:
            check_status, details = CheckStatus.FAILED, f"{req.name} has not been uploaded"
        else:
            check_status, details = CheckStatus.FAILED, status.reason
        checks.append(
            PrerequisiteCheck(
                id=f"document_{req.category}",
                category=CheckCategory.DOCUMENTS,
                name=req.name,
                description=req.description or f"{req.name} must be attached",
                required=req.required,
                status=check_status,
                details=details,
            )
        )
    return checks
