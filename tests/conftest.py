"""
Shared fixtures and fakes for the OPC UA adapter tests.

No OPC UA server is needed: asyncua nodes, clients and the source connector
are replaced by in-memory fakes.
"""

import time

import pytest
from asyncua import ua

from opcua_adapter.config import AdapterConfig
from opcua_adapter.errors import SourceConnectionError
from opcua_adapter.logging import AdapterLogger
from opcua_adapter.pipeline import CollectingSink
from opcua_adapter.types import Point, TypeConverter


# ---------------------------------------------------------------------------
# asyncua node / client fakes
# ---------------------------------------------------------------------------

class FakeEUNode:
    """EngineeringUnits property node."""

    def __init__(self, unit_id):
        self.unit_id = unit_id

    async def read_value(self):
        return ua.EUInformation(UnitId=self.unit_id)


class FakeNode:
    """In-memory stand-in for asyncua.common.node.Node."""

    def __init__(self, identifier, ns=2, node_class=ua.NodeClass.Object,
                 variant_type=None, unit_id=None, value=None, children=None, type_error=None):
        self.nodeid = ua.NodeId(identifier, ns)
        self.node_class = node_class
        self.variant_type = variant_type
        self.unit_id = unit_id
        self.value = value
        self.children = list(children or [])
        self.fail_browse = False
        self.type_error = type_error

    async def read_node_class(self):
        return self.node_class

    async def get_children(self):
        if self.fail_browse:
            raise ua.UaStatusCodeError(ua.StatusCodes.BadNodeIdUnknown)
        return list(self.children)

    async def read_data_type_as_variant_type(self):
        if self.type_error is not None:
            raise self.type_error
        if self.variant_type is None:
            raise ValueError("No builtin variant type")
        return self.variant_type

    async def get_child(self, path):
        if self.unit_id is None:
            raise ua.UaStatusCodeError(ua.StatusCodes.BadNoMatch)
        return FakeEUNode(self.unit_id)

    async def read_data_value(self):
        return ua.DataValue(ua.Variant(self.value, self.variant_type))


def variable(identifier, variant_type=ua.VariantType.Double, value=0.0, unit_id=None, ns=2):
    return FakeNode(identifier, ns=ns, node_class=ua.NodeClass.Variable,
                    variant_type=variant_type, unit_id=unit_id, value=value)


def folder(identifier, *children, ns=2):
    return FakeNode(identifier, ns=ns, node_class=ua.NodeClass.Object, children=children)


def index_tree(root):
    """Map every node id in a fake tree to its node."""
    nodes = {}
    pending = [root]
    while pending:
        node = pending.pop()
        nodes[node.nodeid] = node
        pending.extend(node.children)
    return nodes


class FakeSubscription:
    def __init__(self, period, handler):
        self.period = period
        self.handler = handler
        self.nodes = []
        self.deleted = False

    async def subscribe_data_change(self, nodes):
        self.nodes = list(nodes)
        return list(range(1, len(self.nodes) + 1))

    async def delete(self):
        self.deleted = True


class FakeClient:
    """In-memory stand-in for asyncua.Client."""

    def __init__(self, url, timeout=4, nodes=None, fail_connect=None):
        self.url = url
        self.timeout = timeout
        self.nodes = nodes or {}
        self.fail_connect = fail_connect
        self.user = None
        self.password = None
        self.connected = False
        self.disconnect_calls = 0
        self.subscriptions = []

    def set_user(self, username):
        self.user = username

    def set_password(self, pwd):
        self.password = pwd

    async def connect(self):
        if self.fail_connect is not None:
            raise self.fail_connect
        self.connected = True

    async def disconnect(self):
        self.disconnect_calls += 1
        self.connected = False

    def get_node(self, nodeid):
        return self.nodes[nodeid]

    async def create_subscription(self, period, handler):
        subscription = FakeSubscription(period, handler)
        self.subscriptions.append(subscription)
        return subscription


# ---------------------------------------------------------------------------
# Connector fake for adapter-level tests
# ---------------------------------------------------------------------------

class FakeConnector:
    """Records calls made through the SourceConnector interface."""

    def __init__(self, points=None, options_points=None, samples=None,
                 fail_connect=False, fail_browse=False, server_url="opc.tcp://fake:4840"):
        self.points = list(points or [])
        self.options_points = list(options_points if options_points is not None else self.points)
        self.samples = samples or {}
        self.fail_connect = fail_connect
        self.fail_browse = fail_browse
        self.server_url = server_url
        self.connected = False
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.browse_calls = []
        self.handler = None
        self.subscribed = []
        self.in_callback_thread = False

    def connect(self):
        self.connect_calls += 1
        if self.fail_connect:
            raise SourceConnectionError("connection refused", server_url=self.server_url)
        self.connected = True
        return self

    def disconnect(self):
        self.disconnect_calls += 1
        self.connected = False

    def browse(self, include_subnodes):
        self.browse_calls.append(include_subnodes)
        if self.fail_browse:
            from opcua_adapter.errors import DiscoveryError
            raise DiscoveryError("browse failed", server_url=self.server_url)
        return list(self.points) if include_subnodes else list(self.options_points)

    def sample(self, point):
        return self.samples[point.label]

    def subscribe(self, points, handler):
        self.subscribed = list(points)
        self.handler = handler
        return object()

    def unit_label(self, unit_id):
        return TypeConverter.unit_label(unit_id)

    def __enter__(self):
        return self.connect()

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()


class NotifiedNode:
    """What asyncua hands to datachange_notification as ``node``."""

    def __init__(self, node_id):
        self.nodeid = node_id


def make_point(identifier, runtime_type=None, unit_id=0, ns=2):
    if runtime_type is None:
        runtime_type = TypeConverter.to_runtime_type(ua.VariantType.Double)
    return Point.from_node_id(ua.NodeId(identifier, ns), runtime_type, unit_id)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def reset_logger():
    AdapterLogger.reset()
    yield
    AdapterLogger.reset()


@pytest.fixture
def full_config_dict():
    return {
        "addressing": {"mode": "url", "server_url": "opc.tcp://plc.local:4840"},
        "authentication": {"mode": "anonymous"},
        "root": {"namespace_index": 2, "node_id": "Plant"},
        "selected_nodes": [],
    }


@pytest.fixture
def full_config(full_config_dict):
    return AdapterConfig.from_dict(full_config_dict)


@pytest.fixture
def sink():
    return CollectingSink()


def wait_for(predicate, timeout=5.0):
    """Poll until predicate() is true; False on timeout."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            return False
        time.sleep(0.01)
    return True
