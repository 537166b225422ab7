"""
Operations plugin system for connector actions.

This package provides a pluggable architecture for actions. Each connector
lives in its own subpackage and every ``Operation`` subclass defined there is
discovered by the operation service.
"""
