"""Tests for the multi-subscriber EventEmitter."""

import logging

from aspawn.events import EventEmitter


def test_listeners_run_in_registration_order():
    emitter = EventEmitter()
    calls = []
    emitter.on('x', lambda v: calls.append(('a', v)))
    emitter.on('x', lambda v: calls.append(('b', v)))
    assert emitter.emit('x', 1) is True
    assert calls == [('a', 1), ('b', 1)]


def test_once_listeners_fire_a_single_time():
    emitter = EventEmitter()
    calls = []
    emitter.once('x', calls.append)
    emitter.emit('x', 1)
    emitter.emit('x', 2)
    assert calls == [1]
    assert emitter.listener_count('x') == 0


def test_off_removes_one_registration():
    emitter = EventEmitter()
    calls = []
    emitter.on('x', calls.append)
    emitter.on('x', calls.append)
    emitter.off('x', calls.append)
    emitter.off('y', calls.append)
    emitter.emit('x', 1)
    assert calls == [1]
    assert emitter.listeners('x') == [calls.append]


def test_emit_without_listeners():
    assert EventEmitter().emit('nothing') is False


def test_a_raising_listener_does_not_stop_the_others(caplog):
    emitter = EventEmitter()
    calls = []

    def broken():
        raise RuntimeError('boom')

    emitter.on('x', broken)
    emitter.on('x', lambda: calls.append('after'))
    with caplog.at_level(logging.WARNING, logger='aspawn.events'):
        emitter.emit('x')
    assert calls == ['after']
    assert 'raised' in caplog.text


def test_listeners_added_while_emitting_wait_for_the_next_emit():
    emitter = EventEmitter()
    calls = []

    def add_another():
        emitter.on('x', lambda: calls.append('late'))

    emitter.once('x', add_another)
    emitter.emit('x')
    assert calls == []
    emitter.emit('x')
    assert calls == ['late']
