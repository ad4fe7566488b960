import asyncio

from swiftloan.agents.personas import CONTINUATION_NOTICE, UPLOAD_PROMPTS, greeting_for
from swiftloan.core.errors import ModelConfigurationError, ModelTransportError
from swiftloan.core.session import LoanSession
from swiftloan.models.domain_models import (
    AgentType, Attachment, DocumentType, LoanStatus, ModelResponse, ToolInvocation, TurnRole,
)
from swiftloan.services.chat_service import SYSTEM_ERROR_MESSAGE, TurnOrchestrator
from swiftloan.services.upload_gate import UploadGate

IMAGE = Attachment(data="data:image/jpeg;base64,AAAA", mime_type="image/jpeg", url="blob:1")


class FakeModelClient:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    async def generate(self, request):
        self.requests.append(request)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def run(coro):
    return asyncio.run(coro)


def stage_call(stage, agent):
    return ToolInvocation(name="updateLoanStage", args={"stage": stage, "agent": agent, "statusMessage": "next"})


def approve_call():
    return ToolInvocation(name="approveLoan", args={
        "approvedAmount": 10000, "interestRate": 12, "tenureMonths": 24,
        "applicantName": "Jane Doe", "evidence": "income $5000 > EMI $470x2",
    })


def test_session_starts_with_sales_greeting():
    session = LoanSession()
    turns = session.log.turns()
    assert len(turns) == 1
    assert turns[0].role == TurnRole.ASSISTANT
    assert turns[0].sender == AgentType.SALES.value
    assert session.state.record.status == LoanStatus.INITIAL


def test_plain_reply_keeps_sales_and_initial_status():
    session = LoanSession()
    client = FakeModelClient(ModelResponse(text="Great! What will you use the $10,000 for?"))
    outcome = run(TurnOrchestrator(client).handle_user_message(session, "I need $10,000 for a car"))

    assert outcome.accepted
    turns = session.log.turns()
    assert [t.role for t in turns] == [TurnRole.ASSISTANT, TurnRole.USER, TurnRole.ASSISTANT]
    assert turns[-1].content == "Great! What will you use the $10,000 for?"
    assert turns[-1].sender == "Sales Agent"
    assert session.state.active_agent == AgentType.SALES
    assert session.state.record.status == LoanStatus.INITIAL
    assert not session.busy


def test_handoff_without_text_uses_kyc_greeting():
    session = LoanSession()
    client = FakeModelClient(ModelResponse(text="", tool_calls=[stage_call("kyc", "KYC Agent")]))
    outcome = run(TurnOrchestrator(client).handle_user_message(session, "It's for a car"))

    assert outcome.assistant_turn.content == greeting_for(AgentType.KYC)
    assert outcome.assistant_turn.sender == "KYC Agent"
    assert session.state.active_agent == AgentType.KYC
    assert session.state.record.status == LoanStatus.KYC_PENDING


def test_short_text_is_replaced_after_tool_batch():
    session = LoanSession()
    client = FakeModelClient(ModelResponse(text="OK!", tool_calls=[stage_call("kyc", "KYC Agent")]))
    run(TurnOrchestrator(client).handle_user_message(session, "go ahead"))
    assert session.log.turns()[-1].content == greeting_for(AgentType.KYC)


def test_short_text_without_tools_is_kept():
    session = LoanSession()
    client = FakeModelClient(ModelResponse(text="Sure."))
    run(TurnOrchestrator(client).handle_user_message(session, "ok"))
    assert session.log.turns()[-1].content == "Sure."


def test_upload_prompt_when_agent_unchanged():
    session = LoanSession()
    client = FakeModelClient(ModelResponse(
        text="", tool_calls=[ToolInvocation(name="requestDocument", args={"docType": "income_proof"})],
    ))
    run(TurnOrchestrator(client).handle_user_message(session, "what next?"))
    assert session.log.turns()[-1].content == UPLOAD_PROMPTS[DocumentType.INCOME_PROOF]
    assert session.state.pending_upload == DocumentType.INCOME_PROOF


def test_generic_notice_when_nothing_visible_changed():
    session = LoanSession()
    client = FakeModelClient(ModelResponse(text="", tool_calls=[ToolInvocation(name="somethingNew")]))
    run(TurnOrchestrator(client).handle_user_message(session, "hello"))
    assert session.log.turns()[-1].content == CONTINUATION_NOTICE


def test_empty_reply_without_tools_appends_nothing():
    session = LoanSession()
    client = FakeModelClient(ModelResponse(text="   "))
    outcome = run(TurnOrchestrator(client).handle_user_message(session, "hello"))
    assert outcome.accepted
    assert outcome.assistant_turn is None
    assert [t.role for t in session.log.turns()] == [TurnRole.ASSISTANT, TurnRole.USER]


def test_approval_is_terminal_across_turns():
    session = LoanSession()
    client = FakeModelClient(
        ModelResponse(text="", tool_calls=[approve_call()]),
        ModelResponse(
            text="Actually, let me reconsider that decision for you.",
            tool_calls=[ToolInvocation(name="rejectLoan", args={"reason": "x", "evidence": "y"})],
        ),
    )
    orchestrator = TurnOrchestrator(client)
    run(orchestrator.handle_user_message(session, "here are my details"))

    assert session.state.record.status == LoanStatus.APPROVED
    assert session.state.active_agent == AgentType.SANCTION
    assert session.log.turns()[-1].content == greeting_for(AgentType.SANCTION)

    run(orchestrator.handle_user_message(session, "thanks"))
    assert session.state.record.status == LoanStatus.APPROVED
    assert session.state.record.decision_reason == "meets financial criteria"


def test_empty_submission_is_noop():
    session = LoanSession()
    client = FakeModelClient()
    outcome = run(TurnOrchestrator(client).handle_user_message(session, "   "))
    assert not outcome.accepted
    assert len(session.log) == 1
    assert client.requests == []


def test_attachment_only_submission_is_accepted():
    session = LoanSession()
    client = FakeModelClient(ModelResponse(text="Thanks, I can read your ID clearly."))
    outcome = run(TurnOrchestrator(client).handle_user_message(session, "", IMAGE))
    assert outcome.accepted
    assert outcome.user_turn.attachment == IMAGE
    assert client.requests[0].contents[-1].parts[1].inline_data.data == "AAAA"


def test_busy_session_ignores_submission():
    session = LoanSession()
    session.busy = True
    client = FakeModelClient()
    outcome = run(TurnOrchestrator(client).handle_user_message(session, "hello"))
    assert not outcome.accepted
    assert len(session.log) == 1
    assert session.busy


def test_overlapping_submission_is_dropped():
    class SlowClient(FakeModelClient):
        def __init__(self):
            super().__init__(ModelResponse(text="Done thinking about your loan."))
            self.release = asyncio.Event()

        async def generate(self, request):
            await self.release.wait()
            return await super().generate(request)

    async def scenario():
        session = LoanSession()
        client = SlowClient()
        orchestrator = TurnOrchestrator(client)
        first = asyncio.create_task(orchestrator.handle_user_message(session, "first"))
        await asyncio.sleep(0)
        assert session.busy
        second = await orchestrator.handle_user_message(session, "second")
        length_while_busy = len(session.log)
        client.release.set()
        await first
        return session, second, length_while_busy, client

    session, second, length_while_busy, client = run(scenario())
    assert not second.accepted
    assert length_while_busy == 2
    assert len(client.requests) == 1
    assert [t.content for t in session.log.turns()][1:] == ["first", "Done thinking about your loan."]
    assert not session.busy


def test_any_user_turn_clears_pending_upload():
    session = LoanSession()
    session.state = session.state.model_copy(update={"pending_upload": DocumentType.IDENTITY_PROOF})
    client = FakeModelClient(ModelResponse(text="No worries, take your time."))
    run(TurnOrchestrator(client).handle_user_message(session, "I'll find it later"))
    assert session.state.pending_upload is None


def test_strict_gate_waits_for_attachment():
    session = LoanSession()
    session.state = session.state.model_copy(update={"pending_upload": DocumentType.IDENTITY_PROOF})
    client = FakeModelClient(
        ModelResponse(text="No worries, take your time."),
        ModelResponse(text="Thanks, your ID looks good."),
    )
    orchestrator = TurnOrchestrator(client, gate=UploadGate(clear_on_any_turn=False))

    run(orchestrator.handle_user_message(session, "I'll find it later"))
    assert session.state.pending_upload == DocumentType.IDENTITY_PROOF

    run(orchestrator.handle_user_message(session, "", IMAGE))
    assert session.state.pending_upload is None


def test_transport_error_appends_one_system_turn():
    session = LoanSession()
    before = session.state
    client = FakeModelClient(ModelTransportError("connection reset"))
    outcome = run(TurnOrchestrator(client).handle_user_message(session, "hello"))

    assert outcome.accepted
    assert outcome.assistant_turn is None
    system_turns = [t for t in session.log.turns() if t.role == TurnRole.SYSTEM]
    assert len(system_turns) == 1
    assert system_turns[0].content == SYSTEM_ERROR_MESSAGE
    assert session.state.record == before.record
    assert not session.busy


def test_session_usable_after_configuration_error():
    session = LoanSession()
    client = FakeModelClient(
        ModelConfigurationError("GOOGLE_API_KEY is not configured"),
        ModelResponse(text="Welcome back! How much would you like to borrow?"),
    )
    orchestrator = TurnOrchestrator(client)
    run(orchestrator.handle_user_message(session, "hello"))
    outcome = run(orchestrator.handle_user_message(session, "hello again"))

    assert outcome.assistant_turn.content == "Welcome back! How much would you like to borrow?"
    # the failed turn's error annotation is never sent back to the model
    replayed_roles = [c.role for c in client.requests[1].contents]
    assert replayed_roles == ["model", "user", "user"]
