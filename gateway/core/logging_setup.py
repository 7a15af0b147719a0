import logging
from gateway.core.trace import trace_id_var

class TraceLogFilter(logging.Filter):
    def filter(self, record):
        record.trace_id = trace_id_var.get() or "-"
        return True

def configure_logging(level: str = "INFO"):
    handler = logging.StreamHandler()
    handler.addFilter(TraceLogFilter())
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s [trace_id=%(trace_id)s] %(message)s",
        handlers=[handler],
        force=True,
    )
