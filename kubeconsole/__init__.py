"""kubeconsole — interactive operator console for a local Kubernetes sandbox."""

__version__ = "0.1.0"
