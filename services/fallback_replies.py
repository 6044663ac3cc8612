"""Canned replies used when the chat model cannot answer.

Rules are evaluated in order against the lower-cased user message and the
first match wins, so the table order is part of the observable behaviour.
"""
from typing import Callable, List, Tuple

PAN_REPLY = (
    "PAN (Permanent Account Number) is a 10-character alphanumeric identifier issued by the "
    "Income Tax Department. It follows the format AAAPL1234C and is required for financial "
    "transactions above ₹50,000. You can apply online through NSDL or UTITSL websites."
)
AADHAAR_REPLY = (
    "Aadhaar is a 12-digit unique identity number issued by UIDAI that serves as proof of "
    "identity and address. It is linked to biometric data and can be updated online through "
    "the UIDAI website."
)
VOTER_ID_REPLY = (
    "Voter ID (EPIC) is issued by the Election Commission of India and is required for voting. "
    "Any Indian citizen above 18 years can apply through the National Voter Service Portal."
)
PASSPORT_REPLY = (
    "A passport is valid for 10 years for adults and 5 years for minors. You can apply through "
    "the Passport Seva Portal with regular or tatkal (expedited) options."
)
DRIVING_LICENSE_REPLY = (
    "Driving licenses are issued by the Regional Transport Office (RTO). A learning license is "
    "valid for 6 months, while a permanent license is valid for 20 years. You can apply online "
    "through the Parivahan Sewa portal."
)
CTE_REPLY = (
    "Consent to Establish (CTE) is required for new industrial units before construction. The "
    "application fee varies from ₹10,000 to ₹50,000 depending on project size. Required documents "
    "include project report, land documents, site plan, and process flow diagram."
)
CTE_DOCUMENTS_REPLY = (
    "For a CTE application, you need to submit a project report, land documents, site plan, and "
    "process flow diagram. The application can be submitted online through the State Pollution "
    "Control Board portal."
)
CTE_FEE_REPLY = (
    "The CTE application fee varies from ₹10,000 to ₹50,000 depending on the size and category of "
    "your project. You can check the exact fee applicable to your project on the State Pollution "
    "Control Board website."
)
VERIFICATION_REPLY = (
    "For document verification, original documents must be presented for physical verification. "
    "Self-attestation is required on photocopies, and documents in regional languages need "
    "certified translation."
)
GREETING_REPLY = (
    "Hello! I can help you with any questions you have. Feel free to ask about government "
    "documents, general knowledge, or any other topic you're curious about."
)
UPLOAD_REPLY = (
    "You can upload documents through the upload section. We support various document types "
    "including PDF, DOCX, JPG, and PNG with a maximum file size of 10MB."
)
GENERIC_REPLY = (
    "I'm here to help with any questions you might have. While I specialize in government "
    "documents like PAN, Aadhaar, Voter ID, Passport, or Driving License, I can try to assist "
    "with other topics as well. What would you like to know?"
)


def _any_of(*keywords: str) -> Callable[[str], bool]:
    return lambda text: any(keyword in text for keyword in keywords)


def _fee_question(text: str) -> bool:
    return "fee" in text and ("cte" in text or "application" in text)


# (name, matcher, reply); order matters
FALLBACK_RULES: List[Tuple[str, Callable[[str], bool], str]] = [
    ("pan", _any_of("pan", "permanent account"), PAN_REPLY),
    ("aadhaar", _any_of("aadhaar", "aadhar"), AADHAAR_REPLY),
    ("voter_id", _any_of("voter", "election"), VOTER_ID_REPLY),
    ("passport", _any_of("passport"), PASSPORT_REPLY),
    ("driving_license", _any_of("license", "driving"), DRIVING_LICENSE_REPLY),
    ("cte", _any_of("cte", "consent to establish"), CTE_REPLY),
    ("cte_documents", _any_of("cte application", "cte documents"), CTE_DOCUMENTS_REPLY),
    ("cte_fee", _fee_question, CTE_FEE_REPLY),
    ("verification", _any_of("verification", "verify"), VERIFICATION_REPLY),
    ("greeting", _any_of("hello", "hi"), GREETING_REPLY),
    ("upload", _any_of("document", "upload"), UPLOAD_REPLY),
]


def match_fallback_rule(message: str) -> str:
    """Return the name of the first rule matching ``message``, or ``"generic"``."""
    text = message.lower()
    for name, matches, _ in FALLBACK_RULES:
        if matches(text):
            return name
    return "generic"


def select_fallback_reply(message: str) -> str:
    """Pick the canned reply for ``message`` using case-insensitive substring rules."""
    text = message.lower()
    for _, matches, reply in FALLBACK_RULES:
        if matches(text):
            return reply
    return GENERIC_REPLY
