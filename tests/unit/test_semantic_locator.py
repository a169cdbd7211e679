"""Tests for SemanticLocator strategy ordering, typed results and actions."""

import asyncio
import re

import pytest
from playwright.async_api import Error as PlaywrightError

from src.core.exceptions import ElementNotFoundError
from src.drivers.web.flutter import FlutterHelper
from src.drivers.web.semantics import FocusedElement, LookupStatus
from tests.fakes.page import FakeFlutterPage, FakeNode


@pytest.fixture
def page() -> FakeFlutterPage:
    return FakeFlutterPage(
        [
            FakeNode(role="heading", text="Bem-vindo"),
            FakeNode(role="button", label="start-free", text="Começar Grátis"),
            FakeNode(role="button", text="Já tenho uma conta"),
            FakeNode(role="group", text="Treino A"),
            FakeNode(role="group", text="Treino B"),
            FakeNode(role="text", text="Escondido", visible=False),
        ],
        accessibility_enabled=True,
    )


@pytest.fixture
def helper(page: FakeFlutterPage, test_settings) -> FlutterHelper:
    return FlutterHelper(page, test_settings)


class TestResolution:
    def test_requires_a_target(self, helper: FlutterHelper):
        with pytest.raises(ValueError):
            helper.locate()

    def test_building_never_queries(self, helper: FlutterHelper, page: FakeFlutterPage):
        page.broken = True
        locator = helper.locate(label="anything")
        assert "label='anything'" in repr(locator)

    @pytest.mark.asyncio
    async def test_label_strategy_wins(self, helper: FlutterHelper):
        result = await helper.locate(label="start-free", role="button", text="Começar").resolve()

        assert result
        assert result.strategy == "label"

    @pytest.mark.asyncio
    async def test_falls_back_to_role_and_text(self, helper: FlutterHelper):
        result = await helper.locate(
            label="already-have-account", role="button", text=re.compile("já tenho", re.I)
        ).resolve()

        assert result.status is LookupStatus.FOUND
        assert result.strategy == "role_text"
        assert await result.value.text_content() == "Já tenho uma conta"

    @pytest.mark.asyncio
    async def test_falls_back_to_raw_text(self, helper: FlutterHelper):
        result = await helper.locate(label="welcome-title", role="banner", text="bem-vindo").resolve()

        assert result.strategy == "text"

    @pytest.mark.asyncio
    async def test_role_without_text_matches_any_node_of_role(self, helper: FlutterHelper):
        result = await helper.locate(role="group").resolve()

        assert await result.value.text_content() == "Treino A"

    @pytest.mark.asyncio
    async def test_nth_selects_occurrence(self, helper: FlutterHelper):
        groups = helper.locate(role="group", text="Treino")

        second = await groups.nth(1).resolve()
        third = await groups.nth(2).resolve()

        assert await second.value.text_content() == "Treino B"
        assert not third
        assert groups.first.index == 0

    @pytest.mark.asyncio
    async def test_nth_past_first_matching_strategy_is_a_miss(self, helper: FlutterHelper, page: FakeFlutterPage):
        page.nodes.extend([
            FakeNode(role="button", label="cta", text="Salvar"),
            FakeNode(role="button", text="Salvar rascunho"),
        ])

        result = await helper.locate(label="cta", text="salvar").nth(1).resolve()

        assert result.status is LookupStatus.NOT_FOUND
        assert result.strategy is None

    @pytest.mark.asyncio
    async def test_miss_is_falsy(self, helper: FlutterHelper):
        result = await helper.locate(label="nope", text="nada disso").resolve()

        assert not result
        assert result.status is LookupStatus.NOT_FOUND
        assert result.error is None

    @pytest.mark.asyncio
    async def test_query_failure_is_error_not_absence(self, helper: FlutterHelper, page: FakeFlutterPage):
        page.broken = True

        result = await helper.locate(label="start-free").resolve()

        assert not result
        assert result.status is LookupStatus.ERROR
        assert isinstance(result.error, PlaywrightError)


class TestProbe:
    @pytest.mark.asyncio
    async def test_found(self, helper: FlutterHelper):
        assert await helper.locate(text="Bem-vindo").probe()

    @pytest.mark.asyncio
    async def test_hidden_node_is_not_found(self, helper: FlutterHelper):
        result = await helper.locate(text="Escondido").probe(timeout_ms=50)

        assert result.status is LookupStatus.NOT_FOUND

    @pytest.mark.asyncio
    async def test_error_returned_without_waiting(self, helper: FlutterHelper, page: FakeFlutterPage):
        page.broken = True

        result = await helper.locate(text="Bem-vindo").probe(timeout_ms=5000)

        assert result.status is LookupStatus.ERROR

    @pytest.mark.asyncio
    async def test_waits_for_late_node(self, helper: FlutterHelper, page: FakeFlutterPage):
        async def render_later():
            await asyncio.sleep(0.1)
            page.nodes.append(FakeNode(role="alert", text="Login inválido"))

        task = asyncio.create_task(render_later())
        result = await helper.locate(role="alert").probe(timeout_ms=2000)
        await task

        assert result


class TestWaitFor:
    @pytest.mark.asyncio
    async def test_returns_playwright_locator(self, helper: FlutterHelper):
        locator = await helper.locate(label="start-free").wait_for(100)

        assert await locator.text_content() == "Começar Grátis"

    @pytest.mark.asyncio
    async def test_times_out_with_not_found(self, helper: FlutterHelper):
        with pytest.raises(ElementNotFoundError) as exc_info:
            await helper.locate(label="missing-button").wait_for(50)

        assert exc_info.value.timeout_ms == 50
        assert "missing-button" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_query_failure_raises(self, helper: FlutterHelper, page: FakeFlutterPage):
        page.broken = True

        with pytest.raises(PlaywrightError):
            await helper.locate(label="start-free").wait_for(50)


class TestActions:
    @pytest.mark.asyncio
    async def test_click_uses_pointer_when_it_lands(self, helper: FlutterHelper, page: FakeFlutterPage):
        await helper.locate(label="start-free", role="button").click(100)

        assert page.clicks == [page.nodes[1]]
        assert page.keyboard.presses == []

    @pytest.mark.asyncio
    async def test_click_falls_back_to_keyboard(self, helper: FlutterHelper, page: FakeFlutterPage):
        target = page.nodes[2]
        target.clickable = False

        await helper.locate(role="button", text="já tenho").click(100)

        assert page.clicks == []
        assert page.activations == [target]
        assert page.keyboard.count("Enter") == 1
        assert page.keyboard.count("Tab") == 3

    @pytest.mark.asyncio
    async def test_keyboard_fallback_activates_nth_occurrence(self, helper: FlutterHelper, page: FakeFlutterPage):
        treino_a, treino_b = page.nodes[3], page.nodes[4]
        treino_a.clickable = treino_b.clickable = False

        await helper.locate(role="group").nth(1).click(100)

        assert page.activations == [treino_b]
        assert page.keyboard.count("Tab") == 5

    @pytest.mark.asyncio
    async def test_keyboard_fallback_matches_like_the_text_strategy(
        self, helper: FlutterHelper, page: FakeFlutterPage
    ):
        heading = page.nodes[0]
        heading.clickable = False
        locator = helper.locate(role="banner", text="bem-vindo")

        assert (await locator.resolve()).strategy == "text"
        await locator.click(100)

        assert page.activations == [heading]
        assert page.keyboard.count("Tab") == 1

    @pytest.mark.asyncio
    async def test_click_without_fallback_raises(self, helper: FlutterHelper, page: FakeFlutterPage):
        page.nodes[1].clickable = False

        with pytest.raises(PlaywrightError):
            await helper.locate(label="start-free").click(100, keyboard_fallback=False)

        assert page.keyboard.presses == []

    @pytest.mark.asyncio
    async def test_click_unreachable_by_tab(self, helper: FlutterHelper, page: FakeFlutterPage):
        target = page.nodes[1]
        target.clickable = False
        target.focusable = False

        with pytest.raises(ElementNotFoundError, match="not reachable by Tab"):
            await helper.locate(label="start-free").click(100)

        assert page.activations == []

    @pytest.mark.asyncio
    async def test_fill_targets_nested_input(self, helper: FlutterHelper, page: FakeFlutterPage):
        live = FakeNode(tag="input", focusable=False)
        page.nodes.append(
            FakeNode(
                role="textbox",
                label="name-input",
                children=[FakeNode(tag="input", disabled=True, focusable=False), live],
            )
        )

        await helper.locate(label="name-input").fill("Maria Silva", 100)

        assert live.value == "Maria Silva"
        assert [value for _, value in page.fills] == ["", "Maria Silva"]

    @pytest.mark.asyncio
    async def test_text_content_falls_back_to_label(self, helper: FlutterHelper, page: FakeFlutterPage):
        page.nodes.append(FakeNode(role="img", label="Foto de perfil"))

        assert await helper.locate(label="Foto de perfil").text_content(100) == "Foto de perfil"
        assert await helper.locate(role="heading").text_content(100) == "Bem-vindo"


class TestMatcher:
    def test_follows_resolved_strategy(self, helper: FlutterHelper):
        locator = helper.locate(label="login-button", role="button", text="Entrar")
        link = FocusedElement(role="link", label="login-button", text="Entrar")

        assert locator.matcher("label")(link)
        assert not locator.matcher("role_text")(link)
        assert locator.matcher("role_text")(FocusedElement(role="button", label=None, text="ENTRAR"))
        assert locator.matcher("text")(link)

    def test_any_strategy_without_one_named(self, helper: FlutterHelper):
        matcher = helper.locate(label="login-button", role="button", text="Entrar").matcher()

        assert matcher(FocusedElement(role="link", label="login-button"))
        assert matcher(FocusedElement(role="text", text="Entrar"))
        assert not matcher(FocusedElement(role="button", label="logout-button", text="Sair"))

    def test_text_pattern_checks_label_too(self, helper: FlutterHelper):
        matcher = helper.locate(text=re.compile(r"perfil")).matcher()

        assert matcher(FocusedElement(role="img", label="Foto de perfil"))
        assert not matcher(FocusedElement(role="img", label="Logo"))

    def test_role_only(self, helper: FlutterHelper):
        matcher = helper.locate(role="group").matcher()

        assert matcher(FocusedElement(role="group"))
        assert not matcher(FocusedElement(role="button"))

    def test_label_only_requires_exact_label(self, helper: FlutterHelper):
        matcher = helper.locate(label="start-free").matcher()

        assert matcher(FocusedElement(role="button", label="start-free"))
        assert not matcher(FocusedElement(role="button", label="start-free-2", text="start-free"))
