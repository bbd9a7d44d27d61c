"""readygate: production-readiness gate for source trees and runtime config."""

__version__ = "0.1.0"
