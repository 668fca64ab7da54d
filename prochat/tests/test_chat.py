from datetime import datetime, timedelta

import pytest

from prochat.models import utcnow


@pytest.mark.asyncio
async def test_send_then_history(client, register):
    alice = await register('alice')
    await register('bob')

    before = utcnow()
    sent = await client.post('/api/chat/send', json={'receiver': 'bob', 'message': 'hi'}, headers=alice)
    assert sent.status_code == 201, sent.text
    body = sent.json()
    assert set(body) == {'id', 'sender', 'receiver', 'message', 'timestamp'}
    assert body['sender'] == 'alice'
    assert body['receiver'] == 'bob'
    assert body['message'] == 'hi'
    assert isinstance(body['id'], str)
    sent_at = datetime.fromisoformat(body['timestamp'])
    assert sent_at.utcoffset() == timedelta(0)
    assert sent_at >= before

    history = await client.get('/api/chat/alice/bob', headers=alice)
    assert history.status_code == 200
    msgs = history.json()
    assert len(msgs) == 1
    assert msgs[0] == {**body, 'read': False}


@pytest.mark.asyncio
async def test_history_is_symmetric(client, register):
    alice = await register('alice')
    bob = await register('bob')
    await client.post('/api/chat/send', json={'receiver': 'bob', 'message': 'ping'}, headers=alice)
    await client.post('/api/chat/send', json={'receiver': 'alice', 'message': 'pong'}, headers=bob)

    ab = (await client.get('/api/chat/alice/bob', headers=alice)).json()
    ba = (await client.get('/api/chat/bob/alice', headers=alice)).json()
    from_bob = (await client.get('/api/chat/bob/alice', headers=bob)).json()
    assert ab == ba == from_bob
    assert [m['message'] for m in ab] == ['ping', 'pong']


@pytest.mark.asyncio
async def test_outsider_cannot_read_conversation(client, register):
    alice = await register('alice')
    await register('bob')
    mallory = await register('mallory')
    await client.post('/api/chat/send', json={'receiver': 'bob', 'message': 'secret'}, headers=alice)

    for path in ('/api/chat/alice/bob', '/api/chat/bob/alice'):
        r = await client.get(path, headers=mallory)
        assert r.status_code == 403
        assert r.json() == {'error': 'Forbidden'}


@pytest.mark.asyncio
@pytest.mark.parametrize('text', ['hi', 'x' * 500, 'hello me'])
async def test_cannot_message_yourself(client, register, text):
    alice = await register('alice')
    r = await client.post('/api/chat/send', json={'receiver': 'alice', 'message': text}, headers=alice)
    assert r.status_code == 400
    assert (await client.get('/api/chat/alice/alice', headers=alice)).json() == []


@pytest.mark.asyncio
async def test_send_to_unknown_receiver(client, register):
    alice = await register('alice')
    r = await client.post('/api/chat/send', json={'receiver': 'ghost', 'message': 'hi'}, headers=alice)
    assert r.status_code == 404
    assert r.json() == {'error': 'Receiver not found'}


@pytest.mark.asyncio
@pytest.mark.parametrize('body', [
    {'receiver': 'bob'},
    {'message': 'hi'},
    {'receiver': 'bob', 'message': ''},
    {'receiver': '', 'message': 'hi'},
])
async def test_send_requires_receiver_and_message(client, register, body):
    alice = await register('alice')
    await register('bob')
    r = await client.post('/api/chat/send', json=body, headers=alice)
    assert r.status_code == 400
    assert (await client.get('/api/chat/alice/bob', headers=alice)).json() == []


@pytest.mark.asyncio
async def test_alternating_messages_keep_send_order(client, register):
    alice = await register('alice')
    bob = await register('bob')
    expected = []
    for i in range(10):
        if i % 2 == 0:
            await client.post('/api/chat/send', json={'receiver': 'bob', 'message': f'm{i}'}, headers=alice)
        else:
            await client.post('/api/chat/send', json={'receiver': 'alice', 'message': f'm{i}'}, headers=bob)
        expected.append(f'm{i}')

    msgs = (await client.get('/api/chat/alice/bob', headers=bob)).json()
    assert [m['message'] for m in msgs] == expected
    stamps = [datetime.fromisoformat(m['timestamp']) for m in msgs]
    assert stamps == sorted(stamps)


@pytest.mark.asyncio
async def test_conversations_do_not_leak_into_each_other(client, register):
    alice = await register('alice')
    await register('bob')
    await register('carol')
    await client.post('/api/chat/send', json={'receiver': 'bob', 'message': 'to bob'}, headers=alice)
    await client.post('/api/chat/send', json={'receiver': 'carol', 'message': 'to carol'}, headers=alice)

    with_bob = (await client.get('/api/chat/alice/bob', headers=alice)).json()
    assert [m['message'] for m in with_bob] == ['to bob']


@pytest.mark.asyncio
async def test_history_pagination(client, register):
    alice = await register('alice')
    await register('bob')
    for i in range(5):
        await client.post('/api/chat/send', json={'receiver': 'bob', 'message': f'm{i}'}, headers=alice)

    first = (await client.get('/api/chat/alice/bob', params={'limit': 2}, headers=alice)).json()
    assert [m['message'] for m in first] == ['m0', 'm1']
    rest = (await client.get('/api/chat/alice/bob', params={'after': first[-1]['id']}, headers=alice)).json()
    assert [m['message'] for m in rest] == ['m2', 'm3', 'm4']

    bad = await client.get('/api/chat/alice/bob', params={'limit': 0}, headers=alice)
    assert bad.status_code == 400
    bad = await client.get('/api/chat/alice/bob', params={'after': 'abc'}, headers=alice)
    assert bad.status_code == 400


@pytest.mark.asyncio
async def test_students_excludes_caller_and_secrets(client, register):
    alice = await register('alice')
    await register('bob')
    await register('carol')

    r = await client.get('/api/students', headers=alice)
    assert r.status_code == 200
    students = r.json()
    assert [s['username'] for s in students] == ['bob', 'carol']
    for s in students:
        assert set(s) == {'username', 'createdAt'}


@pytest.mark.asyncio
@pytest.mark.parametrize('after', ['0', '-1', str(2**31), str(2**63)])
async def test_history_cursor_out_of_range(client, register, after):
    alice = await register('alice')
    await register('bob')
    r = await client.get('/api/chat/alice/bob', params={'after': after}, headers=alice)
    assert r.status_code == 400
    assert r.json() == {'error': 'Invalid input'}


@pytest.mark.asyncio
async def test_students_created_at_carries_utc_offset(client, register):
    alice = await register('alice')
    await register('bob')
    students = (await client.get('/api/students', headers=alice)).json()
    assert datetime.fromisoformat(students[0]['createdAt']).utcoffset() == timedelta(0)


@pytest.mark.asyncio
async def test_message_with_nul_is_rejected(client, register):
    alice = await register('alice')
    await register('bob')
    r = await client.post('/api/chat/send', json={'receiver': 'bob', 'message': 'a\x00b'}, headers=alice)
    assert r.status_code == 400
    r = await client.post('/api/chat/send', json={'receiver': 'b\x00b', 'message': 'hi'}, headers=alice)
    assert r.status_code == 400
    assert (await client.get('/api/chat/alice/bob', headers=alice)).json() == []
