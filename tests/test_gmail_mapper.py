import base64

import pytest

from mailtrack.infrastructure.gmail.mapper import gmail_to_history_record, gmail_to_remote_message


def b64(text):
    return base64.urlsafe_b64encode(text.encode()).decode().rstrip("=")


GMAIL_MESSAGE = {
    "id": "18f1",
    "threadId": "18f0",
    "labelIds": ["INBOX", "UNREAD"],
    "snippet": "See attached",
    "historyId": "4321",
    "internalDate": "1714560000000",
    "payload": {
        "mimeType": "multipart/mixed",
        "headers": [
            {"name": "Subject", "value": "Invoice May"},
            {"name": "From", "value": "Billing <billing@example.com>"},
            {"name": "To", "value": "user@example.com, Bob <bob@example.com>"},
            {"name": "Cc", "value": "carol@example.com"},
            {"name": "Message-ID", "value": "<abc@example.com>"},
        ],
        "parts": [
            {
                "mimeType": "multipart/alternative",
                "parts": [
                    {"mimeType": "text/plain", "filename": "", "body": {"data": b64("See attached\n")}},
                    {"mimeType": "text/html", "filename": "", "body": {"data": b64("<p>See attached</p>")}},
                ],
            },
            {
                "mimeType": "application/pdf",
                "filename": "invoice.pdf",
                "body": {"attachmentId": "ANGj", "size": 2048},
            },
        ],
    },
}


def test_full_message_is_mapped():
    message = gmail_to_remote_message(GMAIL_MESSAGE)

    assert message.message_id == "18f1"
    assert message.thread_id == "18f0"
    assert message.subject == "Invoice May"
    assert message.sender == "Billing <billing@example.com>"
    assert message.to == ["user@example.com", "Bob <bob@example.com>"]
    assert message.cc == ["carol@example.com"]
    assert message.text == "See attached"
    assert message.html == "<p>See attached</p>"
    assert message.history_id == 4321
    assert message.date.year == 2024
    assert message.rfc822_message_id == "<abc@example.com>"
    assert message.header("subject") == "Invoice May"

    [attachment] = message.attachments
    assert attachment.attachment_id == "ANGj"
    assert attachment.filename == "invoice.pdf"
    assert attachment.message_id == "18f1"
    assert attachment.size_bytes == 2048


def test_single_part_message_body():
    data = {
        "id": "m2",
        "threadId": "t2",
        "payload": {
            "mimeType": "text/plain",
            "headers": [{"name": "Date", "value": "Wed, 01 May 2024 10:00:00 +0000"}],
            "body": {"data": b64("plain body")},
        },
    }

    message = gmail_to_remote_message(data)

    assert message.text == "plain body"
    assert message.attachments == []
    assert message.date.hour == 10


@pytest.mark.parametrize("data", [{"payload": {}}, {"id": "x"}, {"id": "x", "payload": "nope"}])
def test_malformed_message_raises(data):
    with pytest.raises(ValueError):
        gmail_to_remote_message(data)


def test_history_record_prefers_added_messages_and_dedupes():
    record = gmail_to_history_record(
        {
            "id": "101",
            "messages": [{"id": "a"}, {"id": "b"}, {"id": "z"}],
            "messagesAdded": [{"message": {"id": "a"}}, {"message": {"id": "b"}}, {"message": {"id": "a"}}],
        }
    )

    assert record.history_id == 101
    assert record.message_ids == ("a", "b")


def test_history_record_falls_back_to_messages():
    record = gmail_to_history_record({"id": "7", "messages": [{"id": "c"}]})
    assert record.message_ids == ("c",)
