"""Tests for the ticket, comment and activity services."""

import pytest

from src.c2_ticket_service import TicketService, TicketActivityService, TicketCommentService
from src.c2_ticket_service.comment_service import extract_mentions
from src.core.errors import NotFoundError


async def _create(title, user_id=None, **fields):
    return await TicketService.create_ticket({"title": title, **fields}, user_id)


class TestCreateTicket:
    """Test ticket creation."""

    @pytest.mark.asyncio
    async def test_defaults(self, admin):
        """New tickets land in the backlog with default status, priority and type."""
        ticket = await _create("Printer on fire", admin.id)

        assert ticket["stage"] == "backlog"
        assert ticket["status"] == "aberto"
        assert ticket["priority"] == "media"
        assert ticket["type"] == "outros"
        assert ticket["creator"]["email"] == admin.email
        assert ticket["assignee"] is None

    @pytest.mark.asyncio
    async def test_positions_append_to_stage(self, admin):
        """Each new ticket goes after the last one of its stage."""
        first = await _create("First", admin.id)
        second = await _create("Second", admin.id)
        other_stage = await _create("Elsewhere", admin.id, stage="producao")

        assert second["position"] == first["position"] + 1
        assert other_stage["position"] == 1

    @pytest.mark.asyncio
    async def test_title_required(self, admin):
        with pytest.raises(ValueError):
            await _create("   ", admin.id)

    @pytest.mark.asyncio
    async def test_invalid_status(self, admin):
        with pytest.raises(ValueError, match="Invalid status"):
            await _create("Bad", admin.id, status="resolvido")

    @pytest.mark.asyncio
    async def test_unknown_assignee(self, admin):
        with pytest.raises(ValueError, match="Assignee not found"):
            await _create("Bad", admin.id, assignee_id=9999)

    @pytest.mark.asyncio
    async def test_registration_date_is_normalized_to_utc(self, admin):
        ticket = await _create("Dated", admin.id, registration_date="2025-03-10T12:00:00-03:00")

        assert ticket["registration_date"] == "2025-03-10T15:00:00Z"

    @pytest.mark.asyncio
    async def test_create_records_activity(self, admin):
        ticket = await _create("Logged", admin.id)

        activities = await TicketActivityService.list_activities(ticket["id"])

        assert [a["type"] for a in activities] == ["create"]
        assert activities[0]["to_stage"] == "backlog"


class TestUpdateTicket:
    """Test partial updates."""

    @pytest.mark.asyncio
    async def test_partial_update(self, admin, regular_user):
        ticket = await _create("Original", admin.id, description="keep me")

        updated = await TicketService.update_ticket(
            ticket["id"], {"status": "pendente", "assignee_id": regular_user.id}, admin.id
        )

        assert updated["status"] == "pendente"
        assert updated["description"] == "keep me"
        assert updated["assignee"]["id"] == regular_user.id

    @pytest.mark.asyncio
    async def test_assignee_can_be_cleared(self, admin, regular_user):
        ticket = await _create("Assigned", admin.id, assignee_id=regular_user.id)

        updated = await TicketService.update_ticket(ticket["id"], {"assignee_id": None}, admin.id)

        assert updated["assignee_id"] is None

    @pytest.mark.asyncio
    async def test_update_logs_changed_fields(self, admin):
        ticket = await _create("Original", admin.id)

        await TicketService.update_ticket(ticket["id"], {"title": "Renamed", "priority": "alta"}, admin.id)
        activities = await TicketActivityService.list_activities(ticket["id"])

        assert activities[0]["type"] == "update"
        assert activities[0]["message"] == "Updated title, priority"

    @pytest.mark.asyncio
    async def test_update_missing_ticket(self, admin):
        with pytest.raises(NotFoundError):
            await TicketService.update_ticket(404, {"title": "x"}, admin.id)


class TestKanban:
    """Test stage moves and reordering."""

    @pytest.mark.asyncio
    async def test_move_appends_to_target_stage(self, admin):
        existing = await _create("Already there", admin.id, stage="desenvolvimento")
        ticket = await _create("Mover", admin.id)

        moved = await TicketService.move_ticket_stage(ticket["id"], "desenvolvimento", admin.id)

        assert moved["stage"] == "desenvolvimento"
        assert moved["position"] == existing["position"] + 1

    @pytest.mark.asyncio
    async def test_move_records_activity(self, admin):
        ticket = await _create("Mover", admin.id)

        await TicketService.move_ticket_stage(ticket["id"], "homologacao", admin.id)
        latest = (await TicketActivityService.list_activities(ticket["id"]))[0]

        assert latest["type"] == "move"
        assert latest["from_stage"] == "backlog"
        assert latest["to_stage"] == "homologacao"
        assert latest["message"] == "Moved from backlog to homologacao"

    @pytest.mark.asyncio
    async def test_move_invalid_stage(self, admin):
        ticket = await _create("Mover", admin.id)

        with pytest.raises(ValueError):
            await TicketService.move_ticket_stage(ticket["id"], "done", admin.id)

    @pytest.mark.asyncio
    async def test_reorder_sets_index_positions(self, admin):
        a = await _create("A", admin.id)
        b = await _create("B", admin.id)
        c = await _create("C", admin.id, stage="producao")

        result = await TicketService.reorder_tickets("backlog", [c["id"], b["id"], a["id"]])

        assert result == {"updated": 3}
        tickets = {t["id"]: t for t in await TicketService.list_tickets()}
        assert tickets[c["id"]]["stage"] == "backlog"
        assert [tickets[i]["position"] for i in (c["id"], b["id"], a["id"])] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_reorder_unknown_id_writes_nothing(self, admin):
        a = await _create("A", admin.id)
        b = await _create("B", admin.id)

        with pytest.raises(NotFoundError):
            await TicketService.reorder_tickets("backlog", [b["id"], 999, a["id"]])

        tickets = {t["id"]: t for t in await TicketService.list_tickets()}
        assert tickets[a["id"]]["position"] < tickets[b["id"]]["position"]

    @pytest.mark.asyncio
    async def test_reorder_rejects_duplicates(self, admin):
        a = await _create("A", admin.id)

        with pytest.raises(ValueError):
            await TicketService.reorder_tickets("backlog", [a["id"], a["id"]])

    @pytest.mark.asyncio
    async def test_list_is_in_board_order(self, admin):
        await _create("Prod", admin.id, stage="producao")
        await _create("Backlog 1", admin.id)
        await _create("Backlog 2", admin.id)

        titles = [t["title"] for t in await TicketService.list_tickets()]

        assert titles == ["Backlog 1", "Backlog 2", "Prod"]


class TestComments:
    """Test comments, mentions and followers."""

    def test_extract_mentions(self):
        content = "Ping @ana@example.com and @bob@example.org, again @ana@example.com"

        assert extract_mentions(content) == ["ana@example.com", "bob@example.org"]

    @pytest.mark.asyncio
    async def test_comment_follows_author_and_mentions(self, admin, make_user):
        ana = make_user("ana@example.com")
        ticket = await _create("Discuss", admin.id)

        comment = await TicketCommentService.add_comment(
            ticket["id"], admin.id, "Can @ana@example.com take a look? cc @ghost@example.com"
        )

        assert comment["user"]["id"] == admin.id
        followers = {f["id"] for f in await TicketCommentService.list_followers(ticket["id"])}
        assert followers == {admin.id, ana.id}

    @pytest.mark.asyncio
    async def test_comment_activity_is_truncated(self, admin):
        ticket = await _create("Long", admin.id)

        await TicketCommentService.add_comment(ticket["id"], admin.id, "x" * 500)
        latest = (await TicketActivityService.list_activities(ticket["id"]))[0]

        assert latest["type"] == "comment"
        assert len(latest["message"]) == 280

    @pytest.mark.asyncio
    async def test_blank_comment_rejected(self, admin):
        ticket = await _create("Quiet", admin.id)

        with pytest.raises(ValueError):
            await TicketCommentService.add_comment(ticket["id"], admin.id, "   ")

    @pytest.mark.asyncio
    async def test_comment_on_missing_ticket(self, admin):
        with pytest.raises(NotFoundError):
            await TicketCommentService.add_comment(999, admin.id, "hello")

    @pytest.mark.asyncio
    async def test_comments_oldest_first(self, admin):
        ticket = await _create("Thread", admin.id)
        await TicketCommentService.add_comment(ticket["id"], admin.id, "first")
        await TicketCommentService.add_comment(ticket["id"], admin.id, "second")

        comments = await TicketCommentService.list_comments(ticket["id"])

        assert [c["content"] for c in comments] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_second_comment_does_not_duplicate_follower(self, admin):
        ticket = await _create("Thread", admin.id)
        await TicketCommentService.add_comment(ticket["id"], admin.id, "first")
        await TicketCommentService.add_comment(ticket["id"], admin.id, "second")

        followers = await TicketCommentService.list_followers(ticket["id"])

        assert len(followers) == 1

    @pytest.mark.asyncio
    async def test_toggle_follow(self, admin, regular_user):
        ticket = await _create("Watch", admin.id)

        assert await TicketCommentService.toggle_follow(ticket["id"], regular_user.id) == {"following": True}
        assert await TicketCommentService.toggle_follow(ticket["id"], regular_user.id) == {"following": False}
        assert await TicketCommentService.list_followers(ticket["id"]) == []

    @pytest.mark.asyncio
    async def test_delete_removes_comments_and_followers(self, admin):
        ticket = await _create("Doomed", admin.id)
        await TicketCommentService.add_comment(ticket["id"], admin.id, "bye")

        await TicketService.delete_ticket(ticket["id"])

        with pytest.raises(NotFoundError):
            await TicketCommentService.list_comments(ticket["id"])
        with pytest.raises(NotFoundError):
            await TicketActivityService.list_activities(ticket["id"])
