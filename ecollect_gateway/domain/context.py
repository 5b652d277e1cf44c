"""Assistant prompt construction from account, notes and SMS history"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ecollect_gateway.domain.extraction import get_sms_stats
from ecollect_gateway.domain.models import Account, Note, SMSLog
from ecollect_gateway.domain.risk import classify_risk, risk_description

MAX_CONTEXT_NOTES = 15
MAX_CONTEXT_SMS = 5

SYSTEM_PROMPT = """You are eCollect AI, an intelligent debt collection assistant for eCollect Enterprise. You help collection agents understand customer histories, assess risk, and recommend next actions.

Your role is to:
1. Analyze customer interaction history and payment patterns from the historical notes
2. Provide risk assessments based on Days Past Due (DPD) and account status
3. Suggest effective collection strategies based on past interactions
4. Help agents prepare for customer conversations
5. Summarize account histories concisely
6. Identify patterns in customer behavior from the notes

Guidelines:
- Be professional and compliance-aware
- Reference specific notes, dates, and owners when available from the history
- Consider the full context of customer interactions
- Suggest escalation when appropriate (legal, management review)
- Recommend empathetic approaches while maintaining business objectives
- Always consider regulatory compliance (FDCPA, TCPA, etc.)
- Base your recommendations on the ACTUAL note history provided

Format responses clearly with bullet points when listing multiple items.
Be concise but thorough in your analysis.
When discussing notes, reference them by date and owner when possible."""

PRESET_PROMPTS: Dict[str, str] = {
    "summary": """Please provide a comprehensive summary of this account based on the historical notes including:
1. Key risk factors identified from the interaction history
2. Payment behavior patterns observed in the notes
3. Communication history summary (who contacted, when, outcomes)
4. Customer disposition/attitude observed
5. Recommended next actions based on history

Keep the summary focused and actionable.""",
    "talking_points": """Based on this customer's complete interaction history from the notes, please provide:
1. Key talking points for the next call
2. Previous commitments or promises made by the customer
3. Potential objections to prepare for (based on past interactions)
4. Compliance reminders specific to this case
5. Recommended tone and approach based on past interactions

Format as a brief call preparation guide.""",
    "sentiment": """Analyze the customer's sentiment and disposition based on the interaction history:
1. Overall attitude trend (improving, declining, stable)
2. Key concerns expressed
3. Cooperation level
4. Communication preferences noted
5. Risk of escalation or complaint

Provide actionable insights for the agent.""",
}


def _value(value: object) -> str:
    if value is None or value == "":
        return "N/A"
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _format_amount(amount: float) -> str:
    return f"{amount:,.2f}".rstrip("0").rstrip(".")


def _account_block(account: Account) -> str:
    risk = classify_risk(account.dpd, account.status)
    return (
        "CURRENT ACCOUNT CONTEXT:\n"
        f"- Account Number: {account.account_key}\n"
        f"- Customer Number: {account.custnumber}\n"
        f"- Days Past Due (DPD): {account.dpd}\n"
        f"- Risk Level: {risk.level.value} - {risk_description(risk.level)}\n"
        f"- Status: {account.status}\n"
        f"- Last Contact: {_value(account.last_contact)}\n"
        f"- Total Notes in History: {account.note_count}\n\n"
    )


def _notes_block(notes: Sequence[Note]) -> str:
    if not notes:
        return "No interaction history found for this account.\n"

    lines = [
        "INTERACTION HISTORY FROM DATABASE (Most Recent First):\n",
        f"Total Notes: {len(notes)}\n\n",
    ]
    for index, note in enumerate(notes[:MAX_CONTEXT_NOTES], start=1):
        lines.append(
            f"--- Note {index} ---\n"
            f"Date: {_value(note.notedate)}\n"
            f"Owner/Agent: {_value(note.owner)}\n"
            f"Source: {_value(note.notesrc)}\n"
            f"Reason: {_value(note.reason)}\n"
            f"Details: {_value(note.reasondetails)}\n"
            f"Importance: {_value(note.noteimp)}\n"
            f"Note Content: {_value(note.notemade)}\n\n"
        )
    if len(notes) > MAX_CONTEXT_NOTES:
        lines.append(f"[... and {len(notes) - MAX_CONTEXT_NOTES} older notes not shown]\n")
    return "".join(lines)


def _sms_block(sms_logs: Sequence[SMSLog]) -> str:
    stats = get_sms_stats(sms_logs)
    lines = [
        "\nSMS COMMUNICATION HISTORY:\n",
        f"- Total SMS Sent: {stats.total}\n",
        f"- Successfully Delivered: {stats.successful}\n",
        f"- Failed: {stats.failed}\n",
        f"- Delivery Rate: {stats.success_rate}%\n",
    ]
    if stats.latest_arrears:
        lines.append(f"- Latest Arrears Mentioned: Kes {_format_amount(stats.latest_arrears)}\n")
    if stats.latest_dpd:
        lines.append(f"- Latest DPD from SMS: {stats.latest_dpd} days\n")
    lines.append("\nRecent SMS Messages (Most Recent First):\n")

    for index, sms in enumerate(sms_logs[:MAX_CONTEXT_SMS], start=1):
        lines.append(
            f"--- SMS {index} ---\n"
            f"Date: {_value(sms.date_sent)}\n"
            f"Status: {_value(sms.send_status)}\n"
            f"Phone: {_value(sms.phone_number)}\n"
            f"Message: {_value(sms.message)}\n\n"
        )
    if len(sms_logs) > MAX_CONTEXT_SMS:
        lines.append(f"[... and {len(sms_logs) - MAX_CONTEXT_SMS} older SMS messages not shown]\n")
    return "".join(lines)


def build_account_context(
    account: Optional[Account],
    notes: Sequence[Note],
    sms_logs: Optional[Sequence[SMSLog]] = None,
) -> str:
    """
    Render the account data block the assistant sees before the conversation.

    Notes and SMS logs are expected newest first; only the most recent
    15 notes and 5 messages are included verbatim.
    """
    context = _account_block(account) if account else ""
    context += _notes_block(notes)
    if sms_logs:
        context += _sms_block(sms_logs)
    return context


def build_chat_messages(
    user_message: str,
    context: str,
    history: Sequence[Dict[str, str]] = (),
) -> List[Dict[str, str]]:
    """OpenAI-style message list: system prompt, account data, prior turns, new message"""
    messages = [{"role": "system", "content": SYSTEM_PROMPT}]
    if context:
        messages.append({"role": "system", "content": f"ACCOUNT DATA AND HISTORY:\n{context}"})
    for turn in history:
        messages.append({"role": turn["role"], "content": turn["content"]})
    messages.append({"role": "user", "content": user_message})
    return messages
