"""Prompt templates for the scam simulation."""

from scam_trainer.models.trainee import TraineeProfile

# Counterpart half of the priming pair
PRIMING_ACK = "Understood. I will start the simulation now."

# Hidden first turn that makes the counterpart speak first
OPENER_INSTRUCTION = "(Start the conversation now, playing your role. Greet the victim.)"

PERSONA_FRAMING = """{system_prompt}
The user's name is {name} and they are {age} years old.
Adapt your language to their age.
IMPORTANT: Keep replies short (2-3 sentences at most), like in a real chat."""

ANALYSIS_PROMPT = """Analyze the conversation above. The user was taking part in a scam simulation of type: "{scenario_label}".

Provide educational feedback as simple HTML (no markdown; use only <p>, <b>, <ul>, <li>).
Structure the answer like this:
1. <p><b>Verdict:</b> [Did the user fall for it or defend themselves well?]</p>
2. <p><b>Red Flags:</b></p> <ul>[List of the scam signals that appeared]</ul>
3. <p><b>Safety Tip:</b> [Key recommendation to avoid this in real life]</p>

Be direct and educational."""

ANALYSIS_FALLBACK = "Could not generate the analysis. Connection error."


def build_persona_prompt(system_prompt: str, trainee: TraineeProfile | None = None) -> str:
    """Extend a scenario's persona instruction with the trainee's profile."""
    if trainee is None:
        return system_prompt
    return PERSONA_FRAMING.format(
        system_prompt=system_prompt.strip(),
        name=trainee.name,
        age=trainee.age,
    )


def build_analysis_prompt(scenario_label: str) -> str:
    return ANALYSIS_PROMPT.format(scenario_label=scenario_label)
