"""
OPC UA Adapter Plugin Entry Point.

This module provides the lifecycle interface used by a hosting runtime:
- init(config_path): Load configuration and build the adapter
- start_loop(): Start the subscription
- stop_loop(): Stop the subscription
- cleanup(): Release resources

Failures are logged and reported as False; nothing is raised to the
runtime.
"""

from typing import Optional

from .adapters import OpcUaAdapter
from .config import AdapterConfig, load_config
from .errors import AdapterError
from .logging import get_logger, log_error, log_info
from .pipeline import AdapterPipeline, JsonLinesSink


# Plugin state
_config: Optional[AdapterConfig] = None
_adapter: Optional[OpcUaAdapter] = None


def init(config_path: str, pipeline: Optional[AdapterPipeline] = None, logging_accessor=None) -> bool:
    """
    Initialize the OPC UA adapter plugin.

    Args:
        config_path: Path to the JSON adapter configuration
        pipeline: Receiver of assembled events (JSON lines on stdout if None)
        logging_accessor: Optional runtime logging accessor

    Returns:
        True if initialization successful, False otherwise
    """
    global _config, _adapter

    if logging_accessor is not None and get_logger().initialize(logging_accessor):
        log_info("Logging initialized with runtime accessor")

    log_info("OPC UA adapter plugin initializing...")

    _config = load_config(config_path)
    if not _config:
        log_error("Failed to load configuration")
        return False

    if pipeline is None:
        pipeline = JsonLinesSink()

    try:
        _adapter = OpcUaAdapter().get_instance(_config, pipeline)
    except AdapterError as e:
        log_error(f"Initialization error: {e}")
        return False

    log_info("OPC UA adapter plugin initialized successfully")
    return True


def start_loop() -> bool:
    """
    Start the adapter.

    Returns:
        True if the subscription is running, False otherwise
    """
    log_info("Starting OPC UA adapter...")

    if not _adapter:
        log_error("Plugin not initialized")
        return False

    try:
        _adapter.start_adapter()
    except Exception as e:
        log_error(f"Failed to start adapter: {e}")
        return False

    return True


def stop_loop() -> bool:
    """
    Stop the adapter.

    Returns:
        True if stopped (or not running), False otherwise
    """
    log_info("Stopping OPC UA adapter...")

    if _adapter is None:
        return True

    try:
        _adapter.stop_adapter()
    except Exception as e:
        log_error(f"Error stopping adapter: {e}")
        return False

    return True


def cleanup() -> bool:
    """
    Clean up plugin resources.

    Returns:
        True if cleanup successful, False otherwise
    """
    global _config, _adapter

    log_info("Cleaning up OPC UA adapter plugin...")

    stopped = stop_loop()
    _config = None
    _adapter = None

    log_info("Cleanup completed")
    return stopped


def get_adapter() -> Optional[OpcUaAdapter]:
    """The adapter built by init(), if any."""
    return _adapter


__all__ = ['init', 'start_loop', 'stop_loop', 'cleanup', 'get_adapter']
