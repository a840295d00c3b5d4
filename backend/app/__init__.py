# VEC Upload Service Backend
"""
VEC-to-AAS Upload Service Backend

Accepts VEC files from the upload wizard, converts their XML content to JSON
and asks the AAS generator to create an Asset Administration Shell from it.

Architecture:
- File filter: acceptance policy for uploaded files
- Orchestrator: upload -> process -> generateAas workflow streaming step updates
- Sequencer: generation tokens discarding updates of superseded runs
- Projector: step updates folded into display state
"""

__version__ = "1.0.0"
