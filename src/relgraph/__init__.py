"""relgraph: a typed graph object layer over pluggable async storage."""

__version__ = "0.1.0"
