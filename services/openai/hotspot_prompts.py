"""Prompt builders for thermal hotspot analysis."""

from typing import Optional

COMPONENT_SUBJECTS = {
    "solar": "solar panels",
    "battery": "battery systems",
    "inverter": "inverters",
}

RESPONSE_SHAPE = """{
  "hotspots": [
    {
      "x": percentage from left (0-100),
      "y": percentage from top (0-100),
      "radius": approximate size in pixels,
      "intensity": severity percentage (0-100),
      "area": affected area in pixels,
      "description": "brief description of the defect"
    }
  ],
  "severity": "critical" | "high" | "medium" | "low" | "none",
  "maxTemperature": estimated maximum temperature in Celsius,
  "analysis": "detailed technical analysis",
  "recommendations": ["action item 1", "action item 2", ...],
  "confidence": confidence score (0-1)
}"""


def component_subject(component_type: Optional[str]) -> str:
    """Return the plural noun used to describe the inspected component."""
    return COMPONENT_SUBJECTS.get((component_type or "solar").lower(), COMPONENT_SUBJECTS["solar"])


def build_system_prompt(component_type: Optional[str] = None) -> str:
    """Return the system prompt for the hotspot analyst."""
    return (
        "You are an expert thermal imaging analyst specializing in "
        f"{component_subject(component_type)} defect detection. "
        "Analyze thermal images to identify hotspots, temperature anomalies, and potential failures."
    )


def build_user_prompt(component_type: Optional[str] = None) -> str:
    """Return the user prompt describing the exact JSON shape to return."""
    return (
        f"Analyze this thermal image of {component_subject(component_type)} and identify all hotspots and defects.\n\n"
        f"Return a JSON response with the following structure:\n{RESPONSE_SHAPE}\n\n"
        "Focus on:\n"
        "- Hot spots indicating cell failures or bypass diode activation\n"
        "- Temperature gradients suggesting electrical issues\n"
        "- Uniform heating patterns indicating soiling or shading\n"
        "- Module-level vs cell-level defects\n"
        "- Severity classification based on temperature differential"
    )
