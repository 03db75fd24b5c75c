from time import perf_counter
from typing import Any, Callable, Dict

def timed(func: Callable, *args: Any, **kwargs: Any) -> Dict[str, Any]:
    """Run *func* and return its result dict augmented with duration_s."""
    start = perf_counter()
    result = func(*args, **kwargs)
    if isinstance(result, dict):
        result["duration_s"] = round(perf_counter() - start, 3)
    return result
