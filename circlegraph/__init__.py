from .types import (
    CircleGraphError,
    InvalidIndex,
    InvalidConfig,
    MissingRenderSurface,
    MissingCollaborator,
    PathDescriptor,
    normalize_edge,
)
from .config import (
    Breakpoint,
    PathStyle,
    AnimationSettings,
    DEFAULT_BREAKPOINTS,
    get_default_style,
    set_default_style,
    get_default_animation,
    set_default_animation,
    validate_breakpoints,
)
from .scheduler import ManualScheduler, AsyncioScheduler
from .responsive import LayoutConfig, ResponsiveConfigManager, derive_config, detect_breakpoint
from .geometry import GeometryEngine
from .graph import ConnectionGraph, ConnectionInfo, GraphStats
from .paths import PathState, PathStateMachine, VisualAttributes, Connector
from .animation import AnimationCollaborator, RecordingAnimator, ImmediateAnimator
from .surface import RenderSurface, InMemorySurface
from .coordinator import LayoutCoordinator, LayoutCycle
from .consistency import check_consistency, ConsistencyWarning
from .tikz_codegen import generate_tikz_code, generate_tikz_document, latex_escape_keep_math

__all__ = [
    'CircleGraphError',
    'InvalidIndex',
    'InvalidConfig',
    'MissingRenderSurface',
    'MissingCollaborator',
    'PathDescriptor',
    'normalize_edge',
    'Breakpoint',
    'PathStyle',
    'AnimationSettings',
    'DEFAULT_BREAKPOINTS',
    'get_default_style',
    'set_default_style',
    'get_default_animation',
    'set_default_animation',
    'validate_breakpoints',
    'ManualScheduler',
    'AsyncioScheduler',
    'LayoutConfig',
    'ResponsiveConfigManager',
    'derive_config',
    'detect_breakpoint',
    'GeometryEngine',
    'ConnectionGraph',
    'ConnectionInfo',
    'GraphStats',
    'PathState',
    'PathStateMachine',
    'VisualAttributes',
    'Connector',
    'AnimationCollaborator',
    'RecordingAnimator',
    'ImmediateAnimator',
    'RenderSurface',
    'InMemorySurface',
    'LayoutCoordinator',
    'LayoutCycle',
    'check_consistency',
    'ConsistencyWarning',
    'generate_tikz_code',
    'generate_tikz_document',
    'latex_escape_keep_math',
]
