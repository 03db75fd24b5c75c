from .orchestrator import ConversionOrchestrator

__all__ = ["ConversionOrchestrator"]
