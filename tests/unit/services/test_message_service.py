"""
Tests for business-scoped messaging.

WHY: A conversation always has the business owner on one side; these
tests cover who may write to whom and who may read what.
"""

import pytest

from derra.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from derra.services.message_service import MessageService
from derra.services.notification_service import NotificationService
from tests.factories import make_business, make_category, make_user


async def _setup(storage):
    owner = await make_user(storage, "owner")
    customer = await make_user(storage, "customer")
    stranger = await make_user(storage, "stranger")
    business = await make_business(storage, owner, await make_category(storage))
    return owner, customer, stranger, business


class TestSend:
    @pytest.mark.asyncio
    async def test_customer_writes_to_owner(self, storage):
        owner, customer, _, business = await _setup(storage)

        message = await MessageService(storage).send(customer, owner.id, business.id, "Hello")

        assert message.sender_id == customer.id
        assert await NotificationService(storage).unread_count(owner) == 1

    @pytest.mark.asyncio
    async def test_customer_cannot_write_to_another_customer(self, storage):
        _, customer, stranger, business = await _setup(storage)

        with pytest.raises(ValidationError) as exc_info:
            await MessageService(storage).send(customer, stranger.id, business.id, "Psst")

        assert exc_info.value.message == "Invalid recipient"

    @pytest.mark.asyncio
    async def test_owner_writes_to_anyone(self, storage):
        owner, customer, _, business = await _setup(storage)

        message = await MessageService(storage).send(owner, customer.id, business.id, "Thanks!")

        assert message.receiver_id == customer.id

    @pytest.mark.asyncio
    async def test_owner_writes_to_missing_user(self, storage):
        owner, _, _, business = await _setup(storage)

        with pytest.raises(ResourceNotFoundError) as exc_info:
            await MessageService(storage).send(owner, 999, business.id, "Hello?")

        assert exc_info.value.message == "User not found"

    @pytest.mark.asyncio
    async def test_missing_business(self, storage):
        owner, customer, _, _ = await _setup(storage)

        with pytest.raises(ResourceNotFoundError):
            await MessageService(storage).send(customer, owner.id, 999, "Hello")


class TestRead:
    @pytest.mark.asyncio
    async def test_both_sides_read_the_conversation(self, storage):
        owner, customer, _, business = await _setup(storage)
        service = MessageService(storage)
        question = await service.send(customer, owner.id, business.id, "Open Sunday?")
        answer = await service.send(owner, customer.id, business.id, "Yes, 10 to 4")

        as_owner = await service.conversation(owner, business.id, customer.id)
        as_customer = await service.conversation(customer, business.id, owner.id)

        assert [m.id for m in as_owner] == [question.id, answer.id]
        assert [m.id for m in as_customer] == [question.id, answer.id]

    @pytest.mark.asyncio
    async def test_conversation_without_owner_is_forbidden(self, storage):
        _, customer, stranger, business = await _setup(storage)

        with pytest.raises(AuthorizationError):
            await MessageService(storage).conversation(customer, business.id, stranger.id)

    @pytest.mark.asyncio
    async def test_business_messages_owner_only(self, storage):
        owner, customer, _, business = await _setup(storage)
        service = MessageService(storage)
        await service.send(customer, owner.id, business.id, "Hello")

        assert len(await service.for_business(owner, business.id)) == 1
        with pytest.raises(AuthorizationError):
            await service.for_business(customer, business.id)

    @pytest.mark.asyncio
    async def test_only_receiver_marks_read(self, storage):
        owner, customer, _, business = await _setup(storage)
        service = MessageService(storage)
        message = await service.send(customer, owner.id, business.id, "Hello")

        with pytest.raises(AuthorizationError):
            await service.mark_read(customer, message.id)

        assert (await service.mark_read(owner, message.id)).is_read is True
        with pytest.raises(ResourceNotFoundError):
            await service.mark_read(owner, 999)


class TestNotifications:
    @pytest.mark.asyncio
    async def test_mark_read_checks_recipient(self, storage):
        owner, customer, _, business = await _setup(storage)
        await MessageService(storage).send(customer, owner.id, business.id, "Hello")
        service = NotificationService(storage)
        [notification] = await service.list_for(owner)

        with pytest.raises(AuthorizationError):
            await service.mark_read(customer, notification.id)

        assert (await service.mark_read(owner, notification.id)).is_read is True
        assert await service.unread_count(owner) == 0

    @pytest.mark.asyncio
    async def test_mark_all_read(self, storage):
        owner, customer, stranger, business = await _setup(storage)
        messages = MessageService(storage)
        await messages.send(customer, owner.id, business.id, "One")
        await messages.send(stranger, owner.id, business.id, "Two")
        service = NotificationService(storage)

        assert await service.unread_count(owner) == 2
        assert await service.mark_all_read(owner) is True
        assert await service.unread_count(owner) == 0
