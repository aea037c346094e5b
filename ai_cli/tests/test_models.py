import re
from datetime import datetime

import pytest

from ai_cli.domain.models import ChatExchange, ChatReply, ImageJob, ImageRecord, conversation_title


def test_conversation_title_format():
    title = conversation_title(datetime(2024, 3, 1, 21, 5, 7))
    assert title == "API - 2024/03/01 at 09:05:07 PM"


def test_conversation_title_morning():
    title = conversation_title(datetime(2024, 12, 31, 0, 0, 59))
    assert title == "API - 2024/12/31 at 12:00:59 AM"
    assert re.fullmatch(r"API - \d{4}/\d{2}/\d{2} at \d{2}:\d{2}:\d{2} (AM|PM)", title)


def test_chat_payload_disables_mixed_and_web_search():
    payload = ChatExchange(conversation_id="c1", model="o3-mini", prompt="hi", max_words=200).to_payload()
    assert payload == {
        "type": "CHAT_WITH_AI",
        "conversationId": "c1",
        "model": "o3-mini",
        "promptObject": {
            "prompt": "hi",
            "isMixed": False,
            "webSearch": False,
            "numOfSite": 0,
            "maxWord": 200,
        },
    }


def test_chat_reply_concatenates_in_order():
    reply = ChatReply(model="m", fragments=["a", "b", "c"])
    assert reply.full_response == "abc"


def test_image_payload_requests_single_image():
    job = ImageJob(model="dall-e-3", prompt="a cat", size="1024x1024", quality="hd", style="natural")
    payload = job.to_payload()
    assert payload["type"] == "IMAGE_GENERATOR"
    assert payload["model"] == "dall-e-3"
    assert payload["promptObject"] == {
        "prompt": "a cat",
        "n": 1,
        "size": "1024x1024",
        "quality": "hd",
        "style": "natural",
    }


def test_image_record_from_response():
    record = ImageRecord.from_response(
        {
            "aiRecord": {
                "status": "SUCCESS",
                "temporaryUrl": "https://cdn.test/a.png",
                "aiRecordDetail": {"resultObject": ["a.png"]},
            }
        }
    )
    assert record.succeeded
    assert record.temporary_url == "https://cdn.test/a.png"


def test_image_record_missing_fields():
    record = ImageRecord.from_response({"aiRecord": {"status": "FAILED"}})
    assert not record.succeeded
    assert record.temporary_url == ""


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"aiRecord": "oops"},
        {"aiRecord": {"status": "SUCCESS", "temporaryUrl": 12345}},
        {"aiRecord": {"status": 1}},
        "aiRecord",
    ],
)
def test_image_record_rejects_unexpected_shape(data):
    with pytest.raises(ValueError):
        ImageRecord.from_response(data)
