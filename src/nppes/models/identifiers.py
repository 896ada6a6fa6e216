"""
Identifier and coded-value types used across NPPES records.

NPI = National Provider Identifier (10 digits, Luhn check digit).
"""

from enum import Enum

from nppes.errors import DataValidationError, ValidationRule

# ISO 7812 card issuer prefix for US health identifiers, added before the Luhn check.
NPI_PREFIX = "80840"
NPI_LENGTH = 10


def npi_checksum_valid(digits: str) -> bool:
    """
    Check the NPI check digit.

    The 10 digits are prefixed with 80840 and the result must pass the
    standard Luhn mod-10 check.

    Args:
        digits: String of exactly 10 ASCII digits.

    Returns:
        True if the check digit is correct.
    """
    total = 0
    for i, char in enumerate(reversed(NPI_PREFIX + digits)):
        d = ord(char) - 48
        if i % 2 == 1:
            d *= 2
            if d > 9:
                d -= 9
        total += d
    return total % 10 == 0


class Npi(str):
    """
    Validated National Provider Identifier.

    A ``str`` subclass, so it hashes, compares and sorts as its digits.
    Construction fails for anything that is not 10 digits with a valid
    check digit.
    """

    __slots__ = ()

    def __new__(cls, value: str) -> "Npi":
        if isinstance(value, Npi):
            return value
        text = str(value).strip()
        if not text:
            raise DataValidationError(
                "NPI", "NPI cannot be empty", ValidationRule.MISSING_REQUIRED, text
            )
        if len(text) != NPI_LENGTH or not (text.isascii() and text.isdigit()):
            raise DataValidationError(
                "NPI",
                f"NPI must be exactly {NPI_LENGTH} digits",
                ValidationRule.TYPE_MISMATCH,
                text,
            )
        if not npi_checksum_valid(text):
            raise DataValidationError(
                "NPI", "NPI check digit is invalid", ValidationRule.CHECKSUM, text
            )
        return super().__new__(cls, text)

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Return True if ``value`` would construct a valid NPI."""
        try:
            cls(value)
        except DataValidationError:
            return False
        return True

    def __repr__(self) -> str:
        return f"Npi({str.__repr__(self)})"


class EntityType(Enum):
    """Entity Type Code: 1 = individual, 2 = organization."""

    INDIVIDUAL = "1"
    ORGANIZATION = "2"

    @classmethod
    def from_code(cls, code: str) -> "EntityType":
        """Parse an entity type code."""
        try:
            return cls(code.strip())
        except ValueError:
            msg = f"Invalid entity type code {code!r} (valid: 1 Individual, 2 Organization)"
            raise DataValidationError(
                "Entity Type Code", msg, ValidationRule.INVALID_CODE, code
            ) from None

    @property
    def code(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return self.name.title()

    def __str__(self) -> str:
        return self.label


class AddressKind(str, Enum):
    """Purpose of an address."""

    MAILING = "mailing"
    PRACTICE = "practice"


class DeactivationReason(str, Enum):
    """NPI deactivation reason (DT, DB, FR, OT)."""

    DEATH = "DT"
    DISBANDMENT = "DB"
    FRAUD = "FR"
    OTHER = "OT"


class SexCode(str, Enum):
    """Provider sex code. X is folded into U."""

    MALE = "M"
    FEMALE = "F"
    UNDISCLOSED = "U"


class YesNoFlag(str, Enum):
    """Y/N/X answer used by primary switch, sole proprietor and subpart columns."""

    YES = "Y"
    NO = "N"
    NOT_ANSWERED = "X"


class OtherNameType(str, Enum):
    """Provider Other Organization Name Type Code."""

    FORMER_NAME = "1"
    PROFESSIONAL_NAME = "2"
    DOING_BUSINESS_AS = "3"
    FORMER_LEGAL_BUSINESS_NAME = "4"
    OTHER_NAME = "5"


# Code tables consulted by the schema layer. Keys are upper-cased raw values.
DEACTIVATION_REASON_CODES: dict[str, DeactivationReason] = {
    "DT": DeactivationReason.DEATH,
    "DEATH": DeactivationReason.DEATH,
    "DB": DeactivationReason.DISBANDMENT,
    "DISBANDMENT": DeactivationReason.DISBANDMENT,
    "FR": DeactivationReason.FRAUD,
    "FRAUD": DeactivationReason.FRAUD,
    "OT": DeactivationReason.OTHER,
    "OTHER": DeactivationReason.OTHER,
}

SEX_CODES: dict[str, SexCode] = {
    "M": SexCode.MALE,
    "F": SexCode.FEMALE,
    "U": SexCode.UNDISCLOSED,
    "X": SexCode.UNDISCLOSED,
}

YES_NO_CODES: dict[str, YesNoFlag] = {flag.value: flag for flag in YesNoFlag}

OTHER_NAME_TYPE_CODES: dict[str, OtherNameType] = {t.value: t for t in OtherNameType}

ENTITY_TYPE_CODES: dict[str, EntityType] = {t.value: t for t in EntityType}
