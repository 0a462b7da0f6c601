from .cli import RRIShell, TrafficPrinter, print_query, print_response

__all__ = ["RRIShell", "TrafficPrinter", "print_query", "print_response"]
