from models import AdvisoryRequest, KnowledgeSnippet
from prompt_builder import NOT_AVAILABLE, NOT_IDENTIFIED, NOT_RECORDED, build_prompt


class TestBuildPrompt:

    def test_includes_case_facts(self, advisory_request):
        prompt = build_prompt(advisory_request)
        assert "- Medicine: Testamol" in prompt
        assert "- Provided description: Oral test suspension" in prompt
        assert "- Patient weight: 40.0 kg" in prompt
        assert "- Total daily dose: 600.0 mg" in prompt
        assert "- Daily frequency: 3 doses" in prompt
        assert "- Dose per administration: 200.0 mg" in prompt
        assert "- Volume per dose: 2.0 ml" in prompt
        assert "- Safe range: 0.50 - 5.00 ml" in prompt
        assert "- Current status: Dose within the safe range" in prompt

    def test_missing_description_uses_placeholder(self, dose):
        prompt = build_prompt(AdvisoryRequest.from_dose(dose))
        assert f"- Provided description: {NOT_AVAILABLE}" in prompt

    def test_without_knowledge_explains_lack_of_evidence(self, advisory_request):
        prompt = build_prompt(advisory_request, None)
        assert 'No reliable pharmacological evidence was found for "Testamol"' in prompt
        assert "Pharmacological information found" not in prompt

    def test_knowledge_block(self, advisory_request):
        snippet = KnowledgeSnippet(
            mechanism="Cyclooxygenase Inhibitors",
            indications=["Pain", "Fever"],
            contraindications=["Peptic Ulcer"],
        )
        prompt = build_prompt(advisory_request, snippet)
        assert "- Main class/mechanism: Cyclooxygenase Inhibitors" in prompt
        assert "- Known indications: Pain, Fever" in prompt
        assert "- Reported contraindications: Peptic Ulcer" in prompt

    def test_knowledge_gaps_use_placeholders(self, advisory_request):
        prompt = build_prompt(advisory_request, KnowledgeSnippet(indications=["Pain"]))
        assert f"- Main class/mechanism: {NOT_IDENTIFIED}" in prompt
        assert f"- Reported contraindications: {NOT_RECORDED}" in prompt

    def test_output_format_instructions(self, advisory_request):
        prompt = build_prompt(advisory_request)
        for key in ('"advice"', '"recommendations"', '"warnings"', '"observations"'):
            assert key in prompt
        assert "Return ONLY a valid JSON object" in prompt
        assert "at most 4 items" in prompt
