from typing import TypedDict, Optional, Any
from langchain_core.messages import HumanMessage
from langgraph.graph import StateGraph, START, END
from langchain.chat_models import init_chat_model
import logging

from config import Settings
from services.fallback_replies import select_fallback_reply

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a helpful assistant for the Aura document management system. While you specialize in government document processing, you can answer any question on any topic to the best of your ability.
You help users with document uploads, verification status, detailed questions about government documents and rules, as well as any general knowledge questions they might have.

DOCUMENT SYSTEM INFORMATION:
- The system supports PDF, DOCX, JPG, and PNG formats with a maximum file size of 10MB.
- Document verification typically takes 1-2 business days.
- Users can check document status in the "My Documents" section.
- For urgent requests or additional support, users can contact support@aura-project.com or call +1-800-AURA-HELP (9 AM - 5 PM EST).

GOVERNMENT DOCUMENT KNOWLEDGE:

PAN CARD:
- Permanent Account Number (PAN) is a 10-character alphanumeric identifier issued by the Income Tax Department
- Format: AAAPL1234C (5 letters, 4 numbers, 1 letter)
- Required for financial transactions above ₹50,000
- Application process takes 15-20 days
- Can be applied online through NSDL or UTITSL websites
- Required documents: proof of identity, address proof, and photograph

AADHAAR CARD:
- 12-digit unique identity number issued by UIDAI
- Serves as proof of identity and address
- Linked to biometric data (fingerprints, iris scan)
- Can be updated online through the UIDAI website
- Address changes require supporting documents
- Virtual ID option available for enhanced security

VOTER ID:
- Also known as Election Photo Identity Card (EPIC)
- Issued by the Election Commission of India
- Required for voting in elections
- Can be applied for by any Indian citizen above 18 years
- Online application available through National Voter Service Portal

PASSPORT:
- Official travel document issued by the government
- Valid for 10 years for adults, 5 years for minors
- Regular and tatkal (expedited) application options available
- Police verification required for first-time applicants
- Online application through Passport Seva Portal

DRIVING LICENSE:
- Issued by Regional Transport Office (RTO)
- Learning license valid for 6 months
- Permanent license valid for 20 years
- Online application available through Parivahan Sewa portal
- Renewal must be done before expiration

CTE APPLICATION:
- Consent to Establish (CTE) is required for new industrial units before construction
- Application fee varies from ₹10,000 to ₹50,000 depending on project size
- Required documents: project report, land documents, site plan, process flow diagram
- Processing time is typically 30-45 days
- Validity period is usually 5 years from the date of issue
- Can be applied online through the State Pollution Control Board portal

DOCUMENT VERIFICATION RULES:
- Original documents must be presented for physical verification
- Self-attestation required on photocopies
- Documents in regional languages need certified translation
- Digital signatures accepted for certain online submissions
- Foreign documents require Apostille or Embassy attestation"""


def build_prompt(user_message: str) -> str:
    """Concatenate the fixed system prompt with the user's message."""
    return (
        f"{SYSTEM_PROMPT}\n\n"
        f"User message: {user_message}\n\n"
        "Provide a helpful, concise response with accurate information about government documents and rules."
    )


class ReplyState(TypedDict):
    user_message: str
    reply: Optional[str]
    provider_error: Optional[str]


def create_chat_model(settings: Settings) -> Any:
    """Create the chat model used for replies."""
    return init_chat_model(
        settings.chat_model,
        model_provider=settings.chat_model_provider,
        api_key=settings.gemini_api_key,
        temperature=settings.chat_temperature,
        max_tokens=settings.chat_max_tokens,
    )


def build_reply_graph(model: Optional[Any]):
    """
    Build the reply graph for a chat model.

    ``generate`` asks the model; any failure there is recorded in the state
    and routes to ``fallback``, which answers from the keyword table.
    """

    async def generate(state: ReplyState):
        """Generate a reply with the remote chat model."""
        try:
            if model is None:
                raise RuntimeError("Chat model is not configured")
            response = await model.ainvoke([HumanMessage(content=build_prompt(state["user_message"]))])
            # Joins text blocks when the provider returns a list of content blocks
            text = str(response.text).strip()
            if not text:
                raise ValueError("Chat model returned an empty response")
            return {"reply": text, "provider_error": None}
        except Exception as e:
            logger.warning(f"Chat model call failed, using fallback reply: {e}")
            return {"reply": None, "provider_error": str(e) or type(e).__name__}

    def fallback(state: ReplyState):
        """Answer from the canned keyword table."""
        return {"reply": select_fallback_reply(state["user_message"])}

    def route_after_generate(state: ReplyState):
        return "fallback" if state.get("provider_error") else END

    graph = (
        StateGraph(ReplyState)
        .add_node("generate", generate)
        .add_node("fallback", fallback)
        .add_edge(START, "generate")
        .add_conditional_edges("generate", route_after_generate, {"fallback": "fallback", END: END})
        .add_edge("fallback", END)
    )
    return graph.compile()

