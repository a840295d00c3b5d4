"""
Backend services for the VEC upload service.

Upload workflow pipeline:
- File filter: type and size policy for incoming files
- XML transformer: VEC XML to generator JSON
- Orchestrator: upload, process and generateAas stages
- Sequencer and projector: stale-run guard and display state
"""

from app.services.file_filter import FileAcceptanceFilter
from app.services.orchestrator import WorkflowOrchestrator
from app.services.projector import WorkflowStatusProjector
from app.services.sequencer import RequestSequencer
from app.services.xml_transformer import XmlToJsonTransformer

__all__ = [
    "FileAcceptanceFilter",
    "XmlToJsonTransformer",
    "WorkflowOrchestrator",
    "RequestSequencer",
    "WorkflowStatusProjector",
]
