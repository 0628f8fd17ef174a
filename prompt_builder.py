"""
Create a strict case block + task prompt

Purpose: format the computed dose, optional pharmacological knowledge and output instructions
into a prompt that forces the LLM to answer with a small JSON object.

Input: AdvisoryRequest (wraps the DoseResult), optional KnowledgeSnippet.

Output: prompt_text: str ready to send to the LLM.

Example: returns a prompt beginning with the role instruction, then "Case data:" with one line per
dose fact, then the knowledge block, then "Return ONLY a valid JSON object ..." with the expected shape.

Notes: pure string construction, no network.
"""
from typing import List, Optional

import config
from models import AdvisoryRequest, KnowledgeSnippet

NOT_AVAILABLE = "Not available"
NOT_IDENTIFIED = "Not identified"
NOT_RECORDED = "Not recorded"


def _format_list(values: List[str], empty_fallback: str) -> str:
    return ", ".join(values) if values else empty_fallback


def build_knowledge_block(medicine_name: str, knowledge: Optional[KnowledgeSnippet]) -> str:
    if knowledge is None:
        return (
            f'No reliable pharmacological evidence was found for "{medicine_name}". '
            "If the medicine is not recognisable, leave the lists empty and explain in "
            '"observations" that there is no verified information.\n'
        )

    return (
        "Pharmacological information found:\n"
        f"- Main class/mechanism: {knowledge.mechanism or NOT_IDENTIFIED}\n"
        f"- Known indications: {_format_list(knowledge.indications, NOT_RECORDED)}\n"
        f"- Reported contraindications: {_format_list(knowledge.contraindications, NOT_RECORDED)}\n"
        "- Use the listed contraindications as the basis for WARNINGS when they apply to the case.\n"
    )


def build_prompt(request: AdvisoryRequest, knowledge: Optional[KnowledgeSnippet] = None) -> str:
    dose = request.dose
    max_items = config.MAX_LIST_ITEMS

    return f"""You are a pediatric medical assistant. Cross-check the calculated dose against the official drug information and put safety first.

Case data:
- Medicine: {dose.medicine}
- Provided description: {request.medicine_description or NOT_AVAILABLE}
- Patient weight: {dose.weight_kg} kg
- Total daily dose: {dose.mg_per_day} mg
- Daily frequency: {dose.doses_per_day} doses
- Dose per administration: {dose.mg_per_dose} mg
- Volume per dose: {dose.ml_per_dose} ml
- Safe range: {dose.safe_range}
- Current status: {dose.alert}

{build_knowledge_block(dose.medicine, knowledge)}
Return ONLY a valid JSON object (no extra text, no explanations, no markdown) with this shape:
{{
  "advice": ["text", "text"],
  "recommendations": ["text"],
  "warnings": ["text"],
  "observations": "optional text"
}}

Rules:
- Each list must have at most {max_items} items.
- Use short, specific sentences written for caregivers.
- If there is no data about the medicine, answer "No verifiable pharmacological information for {dose.medicine}" in observations and do not invent data.
- If patient information is missing, state the corresponding warning.
- Do not add legal reminders, the application already shows them."""
