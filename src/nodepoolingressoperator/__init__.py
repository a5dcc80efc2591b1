"""Kubernetes operator that converges per-node-pool NGINX ingress
controllers with the YurtIngress and NodePoolIngress singletons.
"""
