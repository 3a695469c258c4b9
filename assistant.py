"""
Pharmacovigilance chat assistant.

Messages are answered from an ordered rule table: the lower-cased message is
tested against each rule's phrases top to bottom and the first match answers.
The AI mode sends the conversation to Groq and, when that call fails, answers
from the same rule table and flags the connection error for the UI.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from groq import GroqError

import config
from storage import Storage

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an expert pharmacovigilance assistant with deep knowledge of adverse drug reactions, regulatory requirements, drug safety, and medical terminology. You help healthcare professionals with:

- Adverse drug reaction (ADR) identification and assessment
- Drug interaction analysis
- Regulatory reporting requirements (FDA, EMA, WHO guidelines)
- Pharmacovigilance best practices
- Risk assessment and signal detection
- PSUR (Periodic Safety Update Report) guidance
- Medical terminology and coding systems (MedDRA, WHO-ART)
- Clinical trial safety monitoring
- Post-marketing surveillance

Provide accurate, evidence-based responses that are professional and helpful for healthcare professionals. When discussing specific medications or medical conditions, always recommend consulting with qualified healthcare providers for patient-specific advice."""

HELPLINE = "1800 180 3024"


@dataclass(frozen=True)
class QuickReply:
    id: str
    text: str
    query: str


@dataclass
class ChatReply:
    message: str
    options: List[QuickReply] = field(default_factory=list)


@dataclass
class AIReply:
    response: str
    connection_error: bool = False


Responder = Callable[[Storage], ChatReply]


@dataclass(frozen=True)
class Rule:
    name: str
    matches: Callable[[str], bool]
    respond: Responder


def contains_any(*phrases: str) -> Callable[[str], bool]:
    return lambda query: any(phrase in query for phrase in phrases)


def canned(text: str, *options: Tuple[str, str, str]) -> Responder:
    reply_options = [QuickReply(*option) for option in options]
    return lambda storage: ChatReply(text, list(reply_options))


def _lines(*parts: str) -> str:
    return "\n".join(parts)


# Quick replies shared by several rules
REPORTING_REQUIREMENTS = ("reporting_req", "Reporting requirements", "reporting requirements")
PSUR_SCHEDULE = ("psur_timeline", "PSUR submission schedule", "psur submission schedule")
PSUR_CONTENT = ("psur_content", "PSUR content requirements", "psur content")
SERIOUS_DEFINITION = ("serious_adrs", "What are serious ADRs?", "serious adr definition")

MAIN_MENU = (
    ("start_over", "Main menu", "show main menu"),
    ("adr_def", "What is an ADR?", "what is adr"),
    ("deadlines", "Upcoming deadlines", "upcoming deadlines"),
    ("pv_system", "Pharmacovigilance system", "pharmacovigilance system"),
    ("help", "Contact support", "contact support"),
)


def upcoming_deadlines(storage: Storage) -> ChatReply:
    events = storage.calendar.get_upcoming(limit=3)
    if events:
        parts = ["Here are your upcoming deadlines:", ""]
        for event in events:
            parts.append(f"• {event.event_date:%d %b %Y}: {event.title}")
            if event.description:
                parts.append(f"  {event.description}")
        parts += ["", "Would you like to see more details about reporting requirements?"]
        text = _lines(*parts)
    else:
        text = "You don't have any upcoming deadlines. Would you like to add some to your calendar?"
    return ChatReply(text, [
        QuickReply("report_details", "Reporting requirements", "reporting requirements"),
        QuickReply("add_calendar", "Add to my calendar", "how to add to calendar"),
    ])


def _is_adr_definition(query: str) -> bool:
    return "what is adr" in query or "define adr" in query or ("adr" in query and "mean" in query)


RULES: Sequence[Rule] = (
    Rule("deadlines", contains_any("upcoming deadline", "next deadline", "calendar"), upcoming_deadlines),
    Rule("adr_definition", _is_adr_definition, canned(
        _lines(
            "ADR stands for Adverse Drug Reaction. It's an unwanted or harmful effect that occurs after a "
            "medication is administered at normal doses during clinical use. These reactions may be:",
            "",
            "• Type A (Augmented): Dose-dependent, predictable reactions",
            "• Type B (Bizarre): Dose-independent, unpredictable reactions",
            "• Type C (Chronic): Long-term use reactions",
            "• Type D (Delayed): Delayed onset reactions",
        ),
        ("report_adr", "How to report an ADR", "how to report adr"),
        ("examples", "Examples of ADRs", "adr examples"),
    )),
    # Must precede how_to_report.
    Rule("multiple_medications", contains_any("multiple medication", "more than one drug"), canned(
        _lines(
            "To report multiple suspected medications:",
            "",
            "1. Click 'Add Another Medication' in the form",
            "2. Enter details for each medication separately",
            "3. Indicate the likelihood of causality for each",
            "4. List start and end dates for each medication",
            "5. You can remove medications using the 'Remove' button",
        ),
        ("causality", "Assessing causality", "how to assess causality"),
    )),
    Rule("how_to_report", contains_any("adr reporting", "how to report", "submission process"), canned(
        _lines(
            "To report an Adverse Drug Reaction (ADR), follow these steps:",
            "",
            "1. Complete all mandatory fields in the ADR form (marked with *)",
            "2. Include detailed description of the reaction",
            "3. List all medications taken by the patient",
            "4. Provide your contact information as the reporter",
            "5. Submit the form through the system",
            "",
            "All reports are reviewed by our pharmacovigilance team and may require follow-up.",
        ),
        ("mandatory", "Mandatory fields", "mandatory fields"),
        ("timeline", "Reporting timeline", "reporting timeline"),
        ("psur", "PSUR requirements", "psur requirements"),
    )),
    Rule("mandatory_fields", contains_any("mandatory field", "required field", "must fill"), canned(
        _lines(
            "The mandatory fields in the ADR form (marked with *) are:",
            "",
            "• Patient information: Initials, age, gender",
            "• Reaction details: Description, onset date, outcome",
            "• Medication details: Name, dose, route, therapy dates",
            "• Reporter information: Name, profession, contact details",
            "",
            "Incomplete reports may be returned for additional information.",
        ),
        ("patient_confidentiality", "Patient confidentiality", "patient confidentiality"),
        ("form_sections", "Form sections explained", "explain form sections"),
    )),
    Rule("confidentiality", contains_any("confidential", "privacy", "patient data"), canned(
        _lines(
            "Patient confidentiality is maintained throughout the ADR reporting process:",
            "",
            "• Use patient initials instead of full names",
            "• Include only relevant medical history",
            "• All data is protected according to data protection regulations",
            "• Access to reports is restricted to authorized personnel only",
        ),
        ("data_usage", "How data is used", "how is adr data used"),
    )),
    Rule("adr_examples", contains_any("adr example", "example of adverse"), canned(
        _lines(
            "Common examples of Adverse Drug Reactions (ADRs) include:",
            "",
            "• Rash, itching or hives (cutaneous reactions)",
            "• Nausea, vomiting, diarrhea (gastrointestinal)",
            "• Headache, dizziness (neurological)",
            "• Shortness of breath, cough (respiratory)",
            "• Liver or kidney function abnormalities",
            "• Unexpected therapeutic failure",
        ),
        SERIOUS_DEFINITION,
    )),
    # Specific PSUR rules must precede "timeline" and the general "psur" rule.
    Rule("psur_schedule", contains_any("psur submission schedule", "psur timeline"), canned(
        _lines(
            "PSUR submission schedule according to the Pharmacovigilance Guidance Document:",
            "",
            "• Every 6 months for first 2 years after marketing approval",
            "• Annually for the subsequent 2 years",
            "• Thereafter once in 3 years or as per conditions of approval",
            "• PSUR should be submitted within 30 calendar days of the data lock point",
            "• Special reports may be requested by regulatory authorities",
        ),
        PSUR_CONTENT,
        ("psur_submission", "How to submit PSURs", "psur submission"),
    )),
    Rule("psur_content", contains_any("psur content", "what should psur contain"), canned(
        _lines(
            "A Periodic Safety Update Report (PSUR) should contain:",
            "",
            "1. Executive Summary",
            "2. Worldwide Marketing Authorization Status",
            "3. Safety Actions Taken in the Reporting Interval",
            "4. Changes to Reference Safety Information",
            "5. Exposure Estimation",
            "6. Summary Tabulations of Adverse Events",
            "7. Summaries of Safety Signals",
            "8. Signal and Risk Evaluation",
            "9. Benefit Evaluation and Integrated Benefit-Risk Analysis",
        ),
        PSUR_SCHEDULE,
        ("reporting_req", "Other reporting requirements", "reporting requirements"),
    )),
    Rule("psur_submission", contains_any("psur submission", "how to submit psur"), canned(
        _lines(
            "How to submit PSURs:",
            "",
            "• Submit to the CDSCO within 30 calendar days of the data lock point",
            "• Use the specified electronic format",
            "• Include all required sections as per guidance document",
            "• Ensure proper documentation of all adverse events",
            "• Include detailed evaluation of benefit-risk assessment",
            "• Submit to National Coordination Centre-Pharmacovigilance Programme of India (NCC-PvPI)",
        ),
        PSUR_CONTENT,
        ("reporting_req", "General reporting requirements", "reporting requirements"),
    )),
    # TODO: confirm the serious-ADR window with the PvPI guidance; this says 24 hours,
    # the "adverse_event" answer below says 15 days.
    Rule("timeline", contains_any("timeline", "when to report", "how soon"), canned(
        _lines(
            "ADR reporting timelines:",
            "",
            "• Serious ADRs: Report within 24 hours of awareness",
            "• Non-Serious ADRs: Report within 90 calendar days",
            "• Quarterly summary submissions: Due 15 days after quarter end",
            "• PSUR submissions: Due every 6 months or annually",
        ),
        ("serious_def", "What is a serious ADR?", "serious adr definition"),
        PSUR_SCHEDULE,
    )),
    Rule("serious_adr", contains_any("serious adr", "severe reaction"), canned(
        _lines(
            "A serious Adverse Drug Reaction is one that:",
            "",
            "• Results in death",
            "• Is life-threatening",
            "• Requires hospitalization or prolongs existing hospitalization",
            "• Results in persistent or significant disability/incapacity",
            "• Is a congenital anomaly/birth defect",
            "• Requires intervention to prevent permanent impairment",
        ),
        ("report_serious", "How to report serious ADRs", "reporting serious adrs"),
    )),
    Rule("form_sections", contains_any("form section", "section explain"), canned(
        _lines(
            "The ADR reporting form has these main sections:",
            "",
            "1. Patient Information: Demographics and medical history",
            "2. Adverse Reaction Details: Description, dates, severity",
            "3. Suspected Medications: All drugs, including OTC and herbals",
            "4. Concomitant Medications: Other medications taken",
            "5. Relevant Tests/Laboratory Data: Test results",
            "6. Reporter Information: Your contact details",
        ),
        ("multiple_meds", "Reporting multiple medications", "how to report multiple medications"),
    )),
    Rule("psur", contains_any("psur", "periodic safety", "safety update"), canned(
        _lines(
            "Periodic Safety Update Report (PSUR) is a pharmacovigilance document intended to provide a "
            "safety update resulting in the evaluation of the risk-benefit balance of a medicinal product.",
            "",
            "PSUR requirements include:",
            "",
            "• Evaluation of relevant safety, efficacy and effectiveness information",
            "• Summary of safety data with critical analysis",
            "• Examination of whether the safety profile has changed",
            "• Risk-benefit evaluation",
        ),
        PSUR_SCHEDULE,
        PSUR_CONTENT,
    )),
    Rule("pv_system", contains_any("pharmacovigilance system", "pv system"), canned(
        _lines(
            "Marketing Authorization Holders (MAHs) must establish a pharmacovigilance system that includes:",
            "",
            "• A Pharmacovigilance System Master File (PSMF)",
            "• A qualified Pharmacovigilance Officer In-Charge (PVOIC)",
            "• Procedures for collecting and processing adverse event reports",
            "• A quality management system for pharmacovigilance activities",
            "• Risk management planning",
            "• Regular audits and inspections of the pharmacovigilance system",
        ),
        ("psmf", "What is a PSMF?", "what is psmf"),
        REPORTING_REQUIREMENTS,
    )),
    Rule("psmf", contains_any("psmf", "system master file"), canned(
        _lines(
            "A Pharmacovigilance System Master File (PSMF) is a detailed description of the "
            "pharmacovigilance system used by an MAH for their marketed products.",
            "",
            "It should include:",
            "",
            "• Information about the PVOIC (Pharmacovigilance Officer In-Charge)",
            "• Description of computerized systems and databases",
            "• Process descriptions (collection, evaluation & reporting of safety data)",
            "• Quality system for pharmacovigilance activities",
            "• Documentation of qualification and training of personnel",
        ),
        ("pv_system", "Pharmacovigilance system", "pharmacovigilance system"),
        REPORTING_REQUIREMENTS,
    )),
    Rule("causality", contains_any("causality", "causal relationship"), canned(
        _lines(
            "Causality between a suspected medication and a reaction is commonly graded with the "
            "WHO-UMC scale:",
            "",
            "• Certain: plausible time relationship, positive dechallenge and rechallenge",
            "• Probable/Likely: reasonable time relationship, unlikely other causes, positive dechallenge",
            "• Possible: reasonable time relationship, but other causes cannot be excluded",
            "• Unlikely: improbable time relationship, other causes plausible",
            "• Conditional/Unclassified: more data needed",
            "• Unassessable/Unclassifiable: information insufficient or contradictory",
            "",
            "Record dechallenge and rechallenge results in the medication section of the form.",
        ),
        SERIOUS_DEFINITION,
    )),
    Rule("contact_support", contains_any("contact support", "helpline", "talk to someone"), canned(
        _lines(
            f"You can reach the PvPI helpline toll-free at {HELPLINE} (Monday to Friday, 9:00 AM to 5:30 PM).",
            "",
            "For questions about a report you have already submitted, include the report ID shown on the "
            "confirmation screen.",
        ),
        ("report_adr", "How to report an ADR", "how to report adr"),
    )),

    # General pharmacology knowledge base
    Rule("drug_interaction", contains_any("drug interaction", "interaction"), canned(_lines(
        "For drug interaction assessment in pharmacovigilance:",
        "",
        "1. **Clinical Evaluation**: Review patient's complete medication history, including prescription "
        "drugs, OTC medications, and supplements.",
        "",
        "2. **Mechanism Assessment**: Identify potential interactions based on:",
        "   - Pharmacokinetic interactions (absorption, distribution, metabolism, excretion)",
        "   - Pharmacodynamic interactions (additive, synergistic, or antagonistic effects)",
        "",
        "3. **Risk Stratification**: Consider patient-specific factors:",
        "   - Age and comorbidities",
        "   - Hepatic and renal function",
        "   - Genetic polymorphisms affecting drug metabolism",
        "",
        "4. **Documentation**: Use standardized interaction databases (Lexicomp, Micromedex) and document "
        "severity levels (contraindicated, major, moderate, minor).",
        "",
        "5. **Monitoring**: Establish appropriate monitoring parameters for identified interactions.",
        "",
        "Recommended next steps: Consult current drug interaction databases and consider dose adjustments "
        "or alternative therapies when clinically significant interactions are identified.",
    ))),
    Rule("signal_detection", contains_any("signal detection", "safety signal"), canned(_lines(
        "Pharmacovigilance signal detection best practices:",
        "",
        "1. **Data Sources**: Monitor multiple data streams:",
        "   - Spontaneous adverse event reports",
        "   - Clinical trial data",
        "   - Electronic health records",
        "   - Literature surveillance",
        "   - Social media monitoring",
        "",
        "2. **Statistical Methods**:",
        "   - Proportional Reporting Ratio (PRR)",
        "   - Reporting Odds Ratio (ROR)",
        "   - Information Component (IC)",
        "   - Empirical Bayes Geometric Mean (EBGM)",
        "",
        "3. **Signal Validation**: Evaluate biological plausibility, dose-response relationship, temporal "
        "association, and consistency across data sources.",
        "",
        "4. **Regulatory Compliance**: Follow ICH E2E guidelines and maintain traceability of signal "
        "detection activities.",
        "",
        "5. **Risk Communication**: Ensure timely communication of validated signals to regulatory "
        "authorities and healthcare providers.",
        "",
        "Regular review cycles should be established to monitor emerging safety patterns and maintain "
        "signal detection effectiveness.",
    ))),
    Rule("adverse_event", contains_any("adr report", "adverse event", "reporting requirement"), canned(
        _lines(
            "ADR reporting requirements and best practices:",
            "",
            "1. **Mandatory Elements**:",
            "   - Patient identifiers (initials, age, gender)",
            "   - Suspect medication details (name, dose, indication)",
            "   - Adverse event description and outcome",
            "   - Reporter information and contact details",
            "",
            "2. **Timeline Requirements**:",
            "   - Serious ADRs: Report within 15 days of awareness",
            "   - Non-serious ADRs: Include in periodic reports",
            "   - Follow-up information: Submit within 90 days",
            "",
            "3. **Seriousness Criteria** (Any event that):",
            "   - Results in death",
            "   - Is life-threatening",
            "   - Requires hospitalization",
            "   - Results in persistent disability",
            "   - Is a congenital anomaly",
            "   - Requires intervention to prevent permanent damage",
            "",
            "4. **Quality Standards**: Ensure reports are complete, accurate, and include sufficient detail "
            "for medical assessment.",
            "",
            "5. **Regulatory Submission**: Use appropriate channels (FDA MedWatch, EMA EudraVigilance, "
            "local authorities).",
            "",
            "Maintain comprehensive documentation and follow-up procedures to support regulatory compliance "
            "and patient safety.",
        ),
        ("mandatory", "Mandatory fields", "mandatory fields"),
        ("timeline", "Reporting timeline", "reporting timeline"),
    )),
    Rule("elderly", contains_any("elderly", "geriatric"), canned(_lines(
        "Special considerations for pharmacovigilance in elderly patients:",
        "",
        "1. **Age-Related Changes**: Monitor for altered drug metabolism due to decreased hepatic and renal "
        "function, requiring dose adjustments.",
        "",
        "2. **Polypharmacy Risks**: Elderly patients often take multiple medications, increasing "
        "interaction potential and ADR risk.",
        "",
        "3. **Enhanced Monitoring**: Implement more frequent safety assessments for cognitive effects, "
        "falls risk, and cardiovascular complications.",
        "",
        "4. **Reporting Considerations**: Age-related ADRs may be underreported as symptoms are often "
        "attributed to normal aging.",
        "",
        "Recommendation: Establish comprehensive medication review protocols and consider lower starting "
        "doses with careful titration.",
    ))),
    Rule("regulatory", contains_any("regulatory", "compliance"), canned(_lines(
        "Key regulatory compliance requirements for pharmacovigilance:",
        "",
        "1. **Global Standards**: Follow ICH E2A-E2F guidelines for safety reporting and risk management.",
        "",
        "2. **Regional Requirements**:",
        "   - FDA: MedWatch reporting, REMS programs",
        "   - EMA: EudraVigilance, RMP requirements",
        "   - WHO: Uppsala Monitoring Centre collaboration",
        "",
        "3. **Documentation Standards**: Maintain complete audit trails, data integrity, and traceability "
        "for all safety activities.",
        "",
        "4. **Quality Systems**: Implement robust QMS with regular internal audits and corrective action "
        "procedures.",
        "",
        "Essential: Stay current with regulatory updates and maintain qualified person responsibilities "
        "for safety oversight.",
    ))),
)

FALLBACK = canned(
    "Thank you for your query about pharmacovigilance. How else can I assist you with ADR reporting?",
    *MAIN_MENU,
)


def find_rule(message: str) -> Optional[Rule]:
    query = message.lower()
    for rule in RULES:
        if rule.matches(query):
            return rule
    return None


def route_message(message: str, storage: Storage) -> ChatReply:
    """Answer a chat message from the first matching rule, or the main menu."""
    rule = find_rule(message)
    if rule is None:
        logger.debug("No chat rule matched %r", message)
        return FALLBACK(storage)
    logger.debug("Chat rule %s matched", rule.name)
    return rule.respond(storage)


def build_ai_messages(message: str, history: Sequence[Dict[str, str]], limit: Optional[int] = None) -> List[Dict[str, str]]:
    """System preamble, the most recent `limit` history turns, then the new message."""
    if limit is None:
        limit = config.AI_HISTORY_LIMIT
    recent = list(history)[-limit:] if limit > 0 else []
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        *({"role": turn["role"], "content": turn["content"]} for turn in recent),
        {"role": "user", "content": message},
    ]


def ask_ai(client, message: str, history: Sequence[Dict[str, str]], storage: Storage) -> AIReply:
    """
    Ask the Groq model. A failed call is answered from the rule table instead,
    with `connection_error` set; a single attempt is made.
    """
    try:
        chat_completion = client.chat.completions.create(
            messages=build_ai_messages(message, history),
            model=config.GROQ_MODEL,
            temperature=0.7,
            max_completion_tokens=1000,
            top_p=0.95,
            stream=False,
        )
        text = chat_completion.choices[0].message.content
        if not text or not text.strip():
            raise ValueError("empty completion")
        return AIReply(text.strip())
    except (GroqError, LookupError, AttributeError, ValueError) as e:
        logger.warning("AI completion failed, answering from the rule table: %s", e)
        return AIReply(route_message(message, storage).message, connection_error=True)
