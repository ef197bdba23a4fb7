"""Discrete-event simulation of OSPF-style routers: packets, field descriptors, static and traffic-aware routing."""

__version__ = "0.1.0"
__all__ = ["datapacket", "tracepacket", "descriptor", "staticrouter", "trafficrouter"]