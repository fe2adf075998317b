import pytest


@pytest.mark.asyncio
async def test_student_and_admin_exchange_messages(client, create_student, create_admin):
    student = await create_student(full_name="Naledi Sithole")
    admin = await create_admin(full_name="Mr. Petersen")

    first = await client.post(
        "/messages",
        json={"sender_id": student["id"], "sender_role": "student", "receiver_id": admin["id"], "content": "Hello, is my form complete?"},
    )
    assert first.status_code == 201
    msg = first.json()
    assert msg["receiver_role"] == "admin"
    assert msg["is_read"] is False

    reply = await client.post(
        "/messages",
        json={"sender_id": admin["id"], "sender_role": "admin", "receiver_id": student["id"], "content": "Yes, all good."},
    )
    assert reply.status_code == 201
    assert reply.json()["conversation_id"] == msg["conversation_id"]

    thread = await client.get(f"/conversations/{msg['conversation_id']}/messages")
    assert [m["content"] for m in thread.json()] == ["Hello, is my form complete?", "Yes, all good."]

    admin_view = (await client.get(f"/conversations/admin/{admin['id']}")).json()
    assert len(admin_view) == 1
    assert admin_view[0]["counterpart_name"] == "Naledi Sithole"
    assert admin_view[0]["unread_count"] == 1

    student_view = (await client.get(f"/conversations/student/{student['id']}")).json()
    assert student_view[0]["counterpart_name"] == "Mr. Petersen"
    assert student_view[0]["unread_count"] == 1

    read = await client.post(
        f"/conversations/{msg['conversation_id']}/read",
        json={"reader_id": admin["id"], "reader_role": "admin"},
    )
    assert read.json()["updated"] == 1

    admin_view = (await client.get(f"/conversations/admin/{admin['id']}")).json()
    assert admin_view[0]["unread_count"] == 0


@pytest.mark.asyncio
async def test_receiver_must_exist_in_opposite_role(client, create_student):
    student = await create_student()
    peer = await create_student()

    # a student can only write to an admin, so a student id is not a valid receiver
    res = await client.post(
        "/messages",
        json={"sender_id": student["id"], "sender_role": "student", "receiver_id": peer["id"], "content": "hi"},
    )
    assert res.status_code == 404
    assert res.json()["message"] == "Receiver admin not found"


@pytest.mark.asyncio
async def test_unknown_sender(client, create_admin):
    admin = await create_admin()
    res = await client.post(
        "/messages",
        json={"sender_id": 555, "sender_role": "student", "receiver_id": admin["id"], "content": "hi"},
    )
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_blank_message_rejected(client, create_student, create_admin):
    student = await create_student()
    admin = await create_admin()
    res = await client.post(
        "/messages",
        json={"sender_id": student["id"], "sender_role": "student", "receiver_id": admin["id"], "content": "   "},
    )
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_unknown_conversation(client):
    res = await client.get("/conversations/99/messages")
    assert res.status_code == 404
