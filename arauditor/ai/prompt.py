"""Prompt construction for audits, remediation renders and the advisor chat."""

from __future__ import annotations

from loguru import logger

from ..vision.models import AuditIssue

SYSTEM_INSTRUCTIONS = (
    "You are a World-Class Accessibility Consultant specialized in ADA (Americans "
    "with Disabilities Act) and WCAG (Web Content Accessibility Guidelines) "
    "compliance auditing.\n"
    "Your expertise covers spatial reasoning, architectural measurement "
    "estimation, and disability empathy.\n\n"
    "AUDIT RIGOR REQUIREMENTS:\n"
    "1. Doorways: Clear opening width min 32 inches.\n"
    "2. Ramps: Max slope 1:12.\n"
    "3. Operable Parts: Mounting height 15\"-48\".\n"
    "4. Tactile Paving: High visual contrast required.\n"
    "5. Protruding Objects: Max 4\" protrusion between 27\"-80\" high.\n\n"
    "Be objective, technical, and precise."
)

AUDIT_PROMPT = (
    "PERFORM ARCHITECTURAL ACCESSIBILITY AUDIT.\n"
    "Analyze the attached image for ADA and WCAG compliance. Use spatial "
    "reasoning to estimate real-world dimensions based on environmental cues.\n\n"
    "SPECIFIC TARGETS:\n"
    "  • TACTILE PAVING: truncated domes or detectable warning surfaces.\n"
    "  • RAMPS: estimate slope (ADA max 1:12).\n"
    "  • DOORWAYS: estimate clear width (ADA min 32\").\n"
    "  • OPERABLE PARTS: buttons, door openers; height 15\"-48\".\n"
    "  • PROTRUDING OBJECTS: wall-mounted objects protruding >4\".\n\n"
    "Return a JSON object with keys:\n"
    "    issues: list of objects with\n"
    "        type: string            # e.g. RAMP, DOORWAY\n"
    "        status: COMPLIANT|NON_COMPLIANT|WARNING\n"
    "        description: string\n"
    "        recommendation: string\n"
    "        costEstimate: string\n"
    "        coordinates: [ymin, xmin, ymax, xmax]   # 0-1000 scale\n"
    "    overallComplianceScore: integer 0-100\n"
    "### JSON RESPONSE ONLY ###"
)

REMEDIATION_HEADER = (
    "YOU ARE AN ARCHITECTURAL VISUALIZATION ENGINE.\n"
    "Modification Request: {instruction}.\n\n"
    "INSTRUCTIONS:\n"
    "1. Identify the specific spatial barrier in the image.\n"
    "2. Render a realistic, physically integrated ADA-compliant solution.\n"
    "3. MAINTAIN CONTEXT: keep the same perspective, floor textures, wall colors, and lighting.\n"
    "4. REALISM: match materials to the environment (concrete, steel, tile).\n"
    "5. ARCHITECTURAL INTEGRITY: widened doors and walls must look finished.\n\n"
    "GENERATE A PHOTO-REALISTIC VISUAL REMEDIATION."
)


def build_edit_prompt(instruction: str) -> str:
    """Wrap a user remediation instruction in the rendering prompt."""
    prompt = REMEDIATION_HEADER.format(instruction=instruction.strip())
    logger.debug("Edit prompt generated, {0} characters", len(prompt))
    return prompt


def build_advisor_system_prompt(context_label: str) -> str:
    return f"{SYSTEM_INSTRUCTIONS}\n\nYou are a specialist interactive guide for {context_label}."


def build_welcome_message(context_label: str) -> str:
    return (
        f"Hello! I'm your interactive AI guide for this {context_label} session. "
        "I'm here to answer questions about the environment, explain accessibility "
        "standards like ADA or WCAG, and provide remediation advice. "
        "How can I help you today?"
    )


# ---------------------------------------------------------------------------
# Issue-driven instructions and questions
# ---------------------------------------------------------------------------

def build_remediation_instruction(issue: AuditIssue, *, from_report: bool = False) -> str:
    """Prefill text for the remediation view.

    The overlay detail panel and the report list phrase the request slightly
    differently; ``from_report`` selects the report-list wording.
    """
    if from_report:
        return (
            f"REDUCE BARRIER: {issue.category}. Recommended fix: {issue.recommendation}. "
            "Implement this physically into the scene matching lighting and architecture."
        )
    return (
        f"REDUCE BARRIER: {issue.category}. Instruction: {issue.recommendation}. "
        "Create a realistic, architectural fix that matches the environment."
    )


def build_issue_question(issue: AuditIssue, *, from_report: bool = False) -> str:
    """Question appended to the advisor transcript for an issue."""
    if from_report:
        return f'Explain the technical ADA specs for {issue.category}. Auditor found: "{issue.description}"'
    return f"Cite the ADA standards for this {issue.category}: {issue.description}"


def build_scan_summary(score: int) -> str:
    return f"[SYSTEM] Manual Analysis Complete. Accessibility Score: {score}%."


def build_render_note(instruction: str) -> str:
    return f'[SYSTEM] Neural Fix Rendered: "{instruction}"'
