import itertools
import pytest
import threading
import time

import parrot


class Recorder(parrot.base.Publisher):
    """ Publisher that remembers what it was asked to publish, in order.
    """

    def __init__(self):
        self.published = list()
        self.lock = threading.Lock()

    def publish(self, topic, payload):
        with self.lock:
            self.published.append((topic, payload))

    def payloads(self):
        with self.lock:
            return [payload for topic,payload in self.published]


class Broken(parrot.base.Publisher):
    """ Publisher whose transport always fails.
    """

    def __init__(self):
        self.attempts = 0

    def publish(self, topic, payload):
        self.attempts += 1
        raise parrot.base.PublishError('transport is down')


def wait_for(condition, timeout=5):
    """ Poll *condition* until it returns True, or *timeout* seconds pass.
        Returns the final result of *condition*.
    """

    expiration = time.time() + timeout

    while time.time() < expiration:
        if condition():
            return True
        time.sleep(0.01)

    return condition()


def wait_for_subscription(server, client, topic='warmup'):
    """ ZeroMQ subscriptions propagate asynchronously; anything published
        before the subscription lands is silently dropped. Publish until
        something arrives, then discard any stragglers.
    """

    for attempt in range(200):
        server.publish(topic, b'ping')
        if client.recv(timeout=0.05) is not None:
            break
    else:
        raise RuntimeError('subscription never established')

    while client.recv(timeout=0.05) is not None:
        pass


_endpoints = itertools.count()


@pytest.fixture
def inproc_endpoint():
    return 'inproc://parrot-test-%d' % (next(_endpoints))


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def broken():
    return Broken()


@pytest.fixture
def pub_server(inproc_endpoint):
    server = parrot.publish.Server(inproc_endpoint)
    yield server
    server.close()


@pytest.fixture
def subscriber(pub_server):
    client = parrot.publish.Client(pub_server.endpoint)
    wait_for_subscription(pub_server, client)
    yield client
    client.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
