"""
ExecBrief — executive account briefs from unreliable providers.

Revenue from Tableau (or the billing agent), support load from Zendesk,
billing facts from the billing agent, and the risks they add up to.
"""

__version__ = "0.1.0"
__all__ = ["ExecBrief"]

from execbrief.brief import ExecBrief  # noqa: E402
