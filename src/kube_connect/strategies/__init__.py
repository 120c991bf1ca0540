"""
Resolution strategies for Kubernetes cluster connections.

This package contains concrete implementations of the resolution
strategies, all implementing the ConfigStrategy interface defined in base.py.
"""

from .base import ConfigStrategy
from .kubeconfig import KubeconfigStrategy
from .serviceaccount import ServiceAccountStrategy

__all__ = ["ConfigStrategy", "KubeconfigStrategy", "ServiceAccountStrategy"]
