"""Payload templates for the bootstrap pipeline.

Pure functions from a plan (or nothing) to configuration payloads: the
k3d topology, inline manifests, and default Helm values. Nothing here
touches the filesystem or a cluster.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import yaml

from .plan import BootstrapPlan

K3D_API_VERSION = "k3d.io/v1alpha5"
DEFAULT_STORAGE_PATH = "/tmp/k3d-storage"

# Host ports forwarded through the k3d load balancer
LOADBALANCER_PORTS = (80, 443, 9090, 3000, 8080, 5601)

REGISTRY_NAME = "registry.localhost"
REGISTRY_PORT = "5000"


def dump_manifests(manifests: list[dict[str, Any]]) -> str:
    """Serialize manifests as multi-document YAML."""
    return yaml.dump_all(manifests, default_flow_style=False, sort_keys=False)


def _metadata(name: str, namespace: str | None = None, **labels: str) -> dict[str, Any]:
    meta: dict[str, Any] = {"name": name}
    if namespace:
        meta["namespace"] = namespace
    if labels:
        meta["labels"] = dict(labels)
    return meta


# ── Cluster topology ──


def render_topology(
    plan: BootstrapPlan,
    image: str,
    storage_path: str = DEFAULT_STORAGE_PATH,
) -> dict[str, Any]:
    """Build the k3d Simple config for a plan.

    Built-in traefik and servicelb are disabled; ingress comes from the
    pipeline instead.
    """
    return {
        "apiVersion": K3D_API_VERSION,
        "kind": "Simple",
        "metadata": {"name": plan.name},
        "servers": plan.servers,
        "agents": plan.agents,
        "image": image,
        "ports": [
            {"port": f"{port}:{port}", "nodeFilters": ["loadbalancer"]}
            for port in LOADBALANCER_PORTS
        ],
        "volumes": [
            {
                "volume": f"{storage_path}:/var/lib/rancher/k3s/storage",
                "nodeFilters": ["all"],
            }
        ],
        "registries": {
            "create": {
                "name": REGISTRY_NAME,
                "host": "0.0.0.0",
                "hostPort": REGISTRY_PORT,
            }
        },
        "options": {
            "k3s": {
                "extraArgs": [
                    {"arg": "--disable=traefik", "nodeFilters": ["server:*"]},
                    {"arg": "--disable=servicelb", "nodeFilters": ["server:*"]},
                ]
            },
            "kubeconfig": {
                "updateDefaultKubeconfig": True,
                "switchCurrentContext": True,
            },
        },
    }


def topology_yaml(plan: BootstrapPlan, image: str, storage_path: str = DEFAULT_STORAGE_PATH) -> str:
    return yaml.dump(render_topology(plan, image, storage_path), sort_keys=False)


# ── Inline manifests ──


def cert_issuer_manifest() -> str:
    """Self-signed bootstrap issuer, a local CA certificate, and a CA issuer."""
    return dump_manifests(
        [
            {
                "apiVersion": "cert-manager.io/v1",
                "kind": "ClusterIssuer",
                "metadata": _metadata("selfsigned-issuer"),
                "spec": {"selfSigned": {}},
            },
            {
                "apiVersion": "cert-manager.io/v1",
                "kind": "Certificate",
                "metadata": _metadata("local-ca", "cert-manager"),
                "spec": {
                    "isCA": True,
                    "commonName": "local-ca",
                    "secretName": "local-ca-secret",
                    "privateKey": {"algorithm": "ECDSA", "size": 256},
                    "issuerRef": {"name": "selfsigned-issuer", "kind": "ClusterIssuer"},
                },
            },
            {
                "apiVersion": "cert-manager.io/v1",
                "kind": "ClusterIssuer",
                "metadata": _metadata("local-ca-issuer"),
                "spec": {"ca": {"secretName": "local-ca-secret"}},
            },
        ]
    )


def _service(name: str, namespace: str, ports: list[dict[str, Any]], **spec: Any) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": _metadata(name, namespace),
        "spec": {"selector": {"app": name}, "ports": ports, **spec},
    }


def logging_manifest() -> str:
    """Elasticsearch, Fluentd and Kibana in the logging namespace."""
    ns = "logging"
    elasticsearch = {
        "apiVersion": "apps/v1",
        "kind": "StatefulSet",
        "metadata": _metadata("elasticsearch", ns),
        "spec": {
            "serviceName": "elasticsearch",
            "replicas": 1,
            "selector": {"matchLabels": {"app": "elasticsearch"}},
            "template": {
                "metadata": {"labels": {"app": "elasticsearch"}},
                "spec": {
                    "containers": [
                        {
                            "name": "elasticsearch",
                            "image": "docker.elastic.co/elasticsearch/elasticsearch:8.11.1",
                            "env": [
                                {"name": "discovery.type", "value": "single-node"},
                                {"name": "ES_JAVA_OPTS", "value": "-Xms512m -Xmx512m"},
                                {"name": "xpack.security.enabled", "value": "false"},
                            ],
                            "ports": [
                                {"containerPort": 9200, "name": "rest"},
                                {"containerPort": 9300, "name": "inter-node"},
                            ],
                        }
                    ]
                },
            },
        },
    }
    fluentd = {
        "apiVersion": "apps/v1",
        "kind": "DaemonSet",
        "metadata": _metadata("fluentd", ns),
        "spec": {
            "selector": {"matchLabels": {"app": "fluentd"}},
            "template": {
                "metadata": {"labels": {"app": "fluentd"}},
                "spec": {
                    "serviceAccountName": "fluentd",
                    "containers": [
                        {
                            "name": "fluentd",
                            "image": "fluent/fluentd-kubernetes-daemonset:v1-debian-elasticsearch",
                            "env": [
                                {
                                    "name": "FLUENT_ELASTICSEARCH_HOST",
                                    "value": "elasticsearch.logging.svc.cluster.local",
                                },
                                {"name": "FLUENT_ELASTICSEARCH_PORT", "value": "9200"},
                            ],
                            "volumeMounts": [
                                {"name": "varlog", "mountPath": "/var/log"},
                                {
                                    "name": "varlibdockercontainers",
                                    "mountPath": "/var/lib/docker/containers",
                                    "readOnly": True,
                                },
                            ],
                        }
                    ],
                    "volumes": [
                        {"name": "varlog", "hostPath": {"path": "/var/log"}},
                        {
                            "name": "varlibdockercontainers",
                            "hostPath": {"path": "/var/lib/docker/containers"},
                        },
                    ],
                },
            },
        },
    }
    kibana = {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": _metadata("kibana", ns),
        "spec": {
            "replicas": 1,
            "selector": {"matchLabels": {"app": "kibana"}},
            "template": {
                "metadata": {"labels": {"app": "kibana"}},
                "spec": {
                    "containers": [
                        {
                            "name": "kibana",
                            "image": "docker.elastic.co/kibana/kibana:8.11.1",
                            "env": [
                                {"name": "ELASTICSEARCH_HOSTS", "value": "http://elasticsearch:9200"}
                            ],
                            "ports": [{"containerPort": 5601}],
                        }
                    ]
                },
            },
        },
    }
    return dump_manifests(
        [
            {"apiVersion": "v1", "kind": "Namespace", "metadata": _metadata(ns)},
            elasticsearch,
            _service(
                "elasticsearch",
                ns,
                [{"port": 9200, "name": "rest"}, {"port": 9300, "name": "inter-node"}],
            ),
            {"apiVersion": "v1", "kind": "ServiceAccount", "metadata": _metadata("fluentd", ns)},
            {
                "apiVersion": "rbac.authorization.k8s.io/v1",
                "kind": "ClusterRole",
                "metadata": _metadata("fluentd"),
                "rules": [
                    {
                        "apiGroups": [""],
                        "resources": ["pods", "namespaces"],
                        "verbs": ["get", "list", "watch"],
                    }
                ],
            },
            {
                "apiVersion": "rbac.authorization.k8s.io/v1",
                "kind": "ClusterRoleBinding",
                "metadata": _metadata("fluentd"),
                "roleRef": {
                    "kind": "ClusterRole",
                    "name": "fluentd",
                    "apiGroup": "rbac.authorization.k8s.io",
                },
                "subjects": [{"kind": "ServiceAccount", "name": "fluentd", "namespace": ns}],
            },
            fluentd,
            kibana,
            _service("kibana", ns, [{"port": 5601}], type="LoadBalancer"),
        ]
    )


APP_NAMESPACES = ("production", "staging", "development")


def namespaces_manifest() -> str:
    return dump_manifests(
        [
            {
                "apiVersion": "v1",
                "kind": "Namespace",
                "metadata": _metadata(ns, environment=ns),
            }
            for ns in APP_NAMESPACES
        ]
    )


def network_policies_manifest() -> str:
    """Default-deny ingress for production, with same-namespace and ingress-controller exceptions."""

    def policy(name: str, **spec: Any) -> dict[str, Any]:
        return {
            "apiVersion": "networking.k8s.io/v1",
            "kind": "NetworkPolicy",
            "metadata": _metadata(name, "production"),
            "spec": {"policyTypes": ["Ingress"], **spec},
        }

    return dump_manifests(
        [
            policy("default-deny-ingress", podSelector={}),
            policy(
                "allow-same-namespace",
                podSelector={},
                ingress=[{"from": [{"podSelector": {}}]}],
            ),
            policy(
                "allow-from-ingress",
                podSelector={"matchLabels": {"app": "web"}},
                ingress=[
                    {"from": [{"namespaceSelector": {"matchLabels": {"name": "ingress-nginx"}}}]}
                ],
            ),
        ]
    )


def resource_quotas_manifest() -> str:
    return dump_manifests(
        [
            {
                "apiVersion": "v1",
                "kind": "ResourceQuota",
                "metadata": _metadata("compute-quota", "production"),
                "spec": {
                    "hard": {
                        "requests.cpu": "10",
                        "requests.memory": "20Gi",
                        "limits.cpu": "20",
                        "limits.memory": "40Gi",
                        "persistentvolumeclaims": "10",
                    }
                },
            },
            {
                "apiVersion": "v1",
                "kind": "LimitRange",
                "metadata": _metadata("resource-limits", "production"),
                "spec": {
                    "limits": [
                        {
                            "max": {"cpu": "2", "memory": "4Gi"},
                            "min": {"cpu": "100m", "memory": "128Mi"},
                            "default": {"cpu": "500m", "memory": "512Mi"},
                            "defaultRequest": {"cpu": "250m", "memory": "256Mi"},
                            "type": "Container",
                        }
                    ]
                },
            },
        ]
    )


def rbac_manifest() -> str:
    """Full access in development, read-only cluster access from production."""
    rbac_group = "rbac.authorization.k8s.io"
    return dump_manifests(
        [
            {
                "apiVersion": "v1",
                "kind": "ServiceAccount",
                "metadata": _metadata("developer", "development"),
            },
            {
                "apiVersion": f"{rbac_group}/v1",
                "kind": "Role",
                "metadata": _metadata("developer-role", "development"),
                "rules": [
                    {"apiGroups": ["", "apps", "batch"], "resources": ["*"], "verbs": ["*"]}
                ],
            },
            {
                "apiVersion": f"{rbac_group}/v1",
                "kind": "RoleBinding",
                "metadata": _metadata("developer-binding", "development"),
                "subjects": [
                    {"kind": "ServiceAccount", "name": "developer", "namespace": "development"}
                ],
                "roleRef": {"kind": "Role", "name": "developer-role", "apiGroup": rbac_group},
            },
            {
                "apiVersion": "v1",
                "kind": "ServiceAccount",
                "metadata": _metadata("readonly", "production"),
            },
            {
                "apiVersion": f"{rbac_group}/v1",
                "kind": "ClusterRole",
                "metadata": _metadata("readonly-role"),
                "rules": [
                    {"apiGroups": [""], "resources": ["*"], "verbs": ["get", "list", "watch"]}
                ],
            },
            {
                "apiVersion": f"{rbac_group}/v1",
                "kind": "ClusterRoleBinding",
                "metadata": _metadata("readonly-binding"),
                "subjects": [
                    {"kind": "ServiceAccount", "name": "readonly", "namespace": "production"}
                ],
                "roleRef": {
                    "kind": "ClusterRole",
                    "name": "readonly-role",
                    "apiGroup": rbac_group,
                },
            },
        ]
    )


SAMPLE_APP_HOST = "nginx.local"


def sample_app_manifest() -> str:
    """nginx with a metrics exporter, a TLS ingress and an HPA."""
    ns = "production"
    deployment = {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": _metadata("nginx-app", ns),
        "spec": {
            "replicas": 3,
            "selector": {"matchLabels": {"app": "nginx"}},
            "template": {
                "metadata": {
                    "labels": {"app": "nginx"},
                    "annotations": {
                        "prometheus.io/scrape": "true",
                        "prometheus.io/port": "9113",
                    },
                },
                "spec": {
                    "containers": [
                        {
                            "name": "nginx",
                            "image": "nginx:alpine",
                            "ports": [{"containerPort": 80}],
                            "resources": {
                                "requests": {"cpu": "100m", "memory": "128Mi"},
                                "limits": {"cpu": "200m", "memory": "256Mi"},
                            },
                            "livenessProbe": {
                                "httpGet": {"path": "/", "port": 80},
                                "initialDelaySeconds": 30,
                                "periodSeconds": 10,
                            },
                            "readinessProbe": {
                                "httpGet": {"path": "/", "port": 80},
                                "initialDelaySeconds": 5,
                                "periodSeconds": 5,
                            },
                        },
                        {
                            "name": "nginx-exporter",
                            "image": "nginx/nginx-prometheus-exporter:0.11.0",
                            "args": ["-nginx.scrape-uri=http://localhost/stub_status"],
                            "ports": [{"containerPort": 9113}],
                        },
                    ]
                },
            },
        },
    }
    service = {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": _metadata("nginx-service", ns),
        "spec": {"selector": {"app": "nginx"}, "ports": [{"port": 80, "targetPort": 80}]},
    }
    ingress = {
        "apiVersion": "networking.k8s.io/v1",
        "kind": "Ingress",
        "metadata": {
            **_metadata("nginx-ingress", ns),
            "annotations": {"cert-manager.io/cluster-issuer": "local-ca-issuer"},
        },
        "spec": {
            "ingressClassName": "nginx",
            "tls": [{"hosts": [SAMPLE_APP_HOST], "secretName": "nginx-tls"}],
            "rules": [
                {
                    "host": SAMPLE_APP_HOST,
                    "http": {
                        "paths": [
                            {
                                "path": "/",
                                "pathType": "Prefix",
                                "backend": {
                                    "service": {"name": "nginx-service", "port": {"number": 80}}
                                },
                            }
                        ]
                    },
                }
            ],
        },
    }
    hpa = {
        "apiVersion": "autoscaling/v2",
        "kind": "HorizontalPodAutoscaler",
        "metadata": _metadata("nginx-hpa", ns),
        "spec": {
            "scaleTargetRef": {"apiVersion": "apps/v1", "kind": "Deployment", "name": "nginx-app"},
            "minReplicas": 3,
            "maxReplicas": 10,
            "metrics": [
                {
                    "type": "Resource",
                    "resource": {
                        "name": "cpu",
                        "target": {"type": "Utilization", "averageUtilization": 70},
                    },
                }
            ],
        },
    }
    return dump_manifests([deployment, service, ingress, hpa])


# ── Default Helm values ──


def cert_manager_values() -> dict[str, Any]:
    return {"installCRDs": True}


def ingress_values() -> dict[str, Any]:
    # Host ports on every node, reached through the k3d load balancer
    return {
        "controller": {
            "kind": "DaemonSet",
            "hostPort": {"enabled": True},
            "service": {"type": "ClusterIP"},
            "ingressClassResource": {"default": True},
        }
    }


def monitoring_values() -> dict[str, Any]:
    return {
        "grafana": {
            "adminPassword": "admin",
            "service": {"type": "LoadBalancer", "port": 3000},
        },
        "prometheus": {
            "service": {"type": "LoadBalancer", "port": 9090},
            "prometheusSpec": {"scrapeInterval": "15s", "evaluationInterval": "15s"},
        },
        "alertmanager": {"enabled": False},
    }


def delivery_values() -> dict[str, Any]:
    return {
        "server": {
            "service": {"type": "LoadBalancer", "servicePortHttp": 8080},
        }
    }


ManifestTemplate = Callable[[], str]
ValuesTemplate = Callable[[], dict[str, Any]]
