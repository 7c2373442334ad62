from .builder import GenogramGraph, LabelNode, MarriageLink, ParentLink, build_graph
from .config import LayoutConfig, RenderConfig
from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticLog
from .errors import GenogramInputError, MalformedPersonError
from .importers import family_from_dict, load_family
from .layout import GenogramLayout, LayoutResult, layout_family
from .model import Family, LifeEvent, Marriage, Person
from .positioner import EdgeRoute, NodePlacement

__version__ = "0.1.0"
