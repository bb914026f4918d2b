"""
Validation Module.

Validation findings are non-fatal: they are attached to a compiled voucher
so the caller can decide whether to accept it. Shape problems that make a
voucher impossible to build are raised as MalformedInvoiceError by the
PostProcessor instead.

Checks:
    - Required fields present with the expected type (invoice number, total)
    - Transaction type recognized
    - Invoice date parseable and within a sensible range
    - Total tax agrees with its components
    - Voucher balances (party side equals inventory + tax side)
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from config import get_config
from invoice_voucher.extraction.invoice_record import InvoiceRecord
from invoice_voucher.utils.logger import get_logger
from .processor import pick_field

logger = get_logger(__name__)


# Canonical field -> accepted keys in an extracted record
REQUIRED_FIELD_KEYS = {
    'invoice_number': ('invoice_number', 'documentNumber', 'invoiceNumber'),
    'total_amount': ('total_amount', 'grandTotal'),
}

# Canonical field -> expected JSON type
REQUIRED_FIELD_TYPES = {
    'invoice_number': (str,),
    'total_amount': (int, float),
}

# Canonical field -> InvoiceRecord attribute
REQUIRED_RECORD_ATTRIBUTES = {
    'invoice_number': 'document_number',
    'total_amount': 'grand_total',
}


class ValidationResult:
    """
    Contains the result of validation checks.

    Attributes:
        is_valid: False once any error has been recorded
        errors: List of error messages
        warnings: List of warning messages
        issues: Structured findings ({field, message, severity})
    """

    def __init__(self):
        self.is_valid = True
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.issues: List[Dict[str, Any]] = []

    def add_error(self, message: str, field: Optional[str] = None) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(message)
        self.issues.append({'field': field, 'message': message, 'severity': 'error'})
        self.is_valid = False

    def add_warning(self, message: str, field: Optional[str] = None) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(message)
        self.issues.append({'field': field, 'message': message, 'severity': 'warning'})

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'errors': self.errors,
            'warnings': self.warnings,
            'issues': self.issues
        }


class InvoiceValidator:
    """
    Produces validation findings for an invoice record and its voucher.

    Example:
        >>> validator = InvoiceValidator()
        >>> result = validator.validate(record, voucher, raw=extracted)
        >>> result.is_valid
        True
    """

    MIN_YEAR = 2000
    MAX_YEAR = 2100

    def __init__(
        self,
        required_fields: Optional[List[str]] = None,
        total_tolerance: Optional[float] = None,
        balance_tolerance: Optional[float] = None
    ) -> None:
        self.required_fields = required_fields or get_config(
            "postprocessing.validation.required_fields",
            list(REQUIRED_FIELD_KEYS)
        )
        self.total_tolerance = total_tolerance if total_tolerance is not None else \
            get_config("postprocessing.validation.total_tolerance", 1.0)
        self.balance_tolerance = balance_tolerance if balance_tolerance is not None else \
            get_config("voucher.balance_tolerance", 1e-6)

        logger.debug(f"InvoiceValidator initialized (required: {self.required_fields})")

    def check_required_fields(self, raw: Mapping[str, Any]) -> List[Tuple[str, str]]:
        """
        Check required fields on the extracted mapping.

        Returns:
            List of (field, message) for fields that are missing, null or
            of the wrong JSON type.
        """
        problems = []

        for field_name in self.required_fields:
            keys = REQUIRED_FIELD_KEYS.get(field_name, (field_name,))
            _, value = pick_field(raw, keys)

            if value is None:
                problems.append((field_name, f"Required field missing: {field_name}"))
                continue

            expected = REQUIRED_FIELD_TYPES.get(field_name)
            if expected and (isinstance(value, bool) or not isinstance(value, expected)):
                type_names = ' or '.join(t.__name__ for t in expected)
                problems.append((
                    field_name,
                    f"Expected {type_names} for {field_name}, got {type(value).__name__}"
                ))

        return problems

    def check_record_fields(self, record: InvoiceRecord) -> List[Tuple[str, str]]:
        """Check required fields on the normalized record."""
        problems = []
        for field_name in self.required_fields:
            attribute = REQUIRED_RECORD_ATTRIBUTES.get(field_name)
            if attribute and getattr(record, attribute) is None:
                problems.append((field_name, f"Required field missing: {field_name}"))
        return problems

    def check_date(self, date_str: Optional[str]) -> Tuple[bool, str]:
        """
        Validate an ISO date produced by the PostProcessor.

        Returns:
            Tuple of (is_valid, message).
        """
        if not date_str:
            return False, "Invoice date missing; placeholder date used"

        try:
            parsed = datetime.strptime(date_str, "%Y-%m-%d")
        except ValueError:
            return False, f"Invoice date '{date_str}' is not a recognizable date"

        if parsed.year < self.MIN_YEAR:
            return False, f"Year {parsed.year} is too old"
        if parsed.year > self.MAX_YEAR:
            return False, f"Year {parsed.year} is too far in future"

        return True, "Valid date"

    def validate(
        self,
        record: InvoiceRecord,
        voucher: Any = None,
        raw: Optional[Mapping[str, Any]] = None
    ) -> ValidationResult:
        """
        Run all checks.

        Args:
            record: Normalized invoice record.
            voucher: Voucher built from the record (balance check skipped if None).
            raw: Extracted mapping the record came from. When given, required
                 fields are also type-checked against it.

        Returns:
            ValidationResult with all findings.
        """
        validation = ValidationResult()

        problems = dict(self.check_required_fields(raw)) if raw is not None else {}
        for field_name, message in self.check_record_fields(record):
            problems.setdefault(field_name, message)
        for field_name, message in problems.items():
            validation.add_error(message, field_name)

        for warning in record.warnings:
            validation.add_warning(warning)

        is_valid, message = self.check_date(record.document_date)
        if not is_valid:
            validation.add_warning(message, 'invoice_date')

        if record.grand_total is None:
            validation.add_warning(
                "Grand total missing; derived from line items and taxes",
                'total_amount'
            )

        taxes = record.tax_breakdown
        if taxes.total_tax and abs(taxes.total_tax - taxes.component_sum) > self.total_tolerance:
            validation.add_warning(
                f"Total tax {taxes.total_tax} differs from CGST+SGST+IGST {taxes.component_sum}",
                'tax_details.total_tax'
            )

        if voucher is not None and record.line_items is not None:
            balance = voucher.balance
            if abs(balance) > self.balance_tolerance:
                validation.add_error(
                    f"Voucher does not balance: party and inventory/tax sides differ by {balance:.2f}",
                    'total_amount'
                )

        self._log_summary(validation)
        return validation

    def _log_summary(self, validation: ValidationResult) -> None:
        logger.info(
            f"Validation complete: "
            f"{len(validation.errors)} errors, "
            f"{len(validation.warnings)} warnings"
        )

        for error in validation.errors:
            logger.warning(f"Validation error: {error}")

        for warning in validation.warnings[:5]:  # Limit logging
            logger.debug(f"Validation warning: {warning}")
