"""
Rejuvenator Agent Prompts

Centralized prompt templates for every generative stage.
This is the canonical source for all pipeline prompts.
"""

from dataclasses import dataclass


@dataclass
class AgentPrompt:
    """A prompt template for an agent."""
    name: str
    template: str
    description: str = ""


class AgentPromptLibrary:
    """
    Library of all stage prompts.

    Templates use ``str.format`` placeholders; literal braces are doubled.
    """

    # ==========================================================================
    # CHARACTER BIBLE
    # ==========================================================================

    CHARACTER_BIBLE = """I am producing a high-stakes film. I need a master "Character Bible" for consistency.

ASSET LIST (AVATARS): {avatar_list}

FULL SCRIPT EXCERPT:
{script_excerpt}

TASK:
1. EXHAUSTIVE ANALYSIS: For every character in the script, define their visual blueprint: skin tone, hair texture, distinct facial features (sharp jaw, hooked nose, etc.), and their signature "vibe" (neurotic, imposing, deceptive).
2. ASSET MAPPING: Map the provided filenames to these characters. Be logical. If 'avatar_boss.png' exists, it matches the 'Boss' character.
3. STYLE KEY: Note their unique dialogue patterns to help infer physical performance.

Format this as a technical production document for visual effects artists."""

    # ==========================================================================
    # FRAME ANALYSIS
    # ==========================================================================

    FRAME_ANALYSIS = (
        "DECONSTRUCT THIS FRAME: Describe the exact lighting setup (e.g., chiaroscuro, high-key), "
        "the camera lens feel, the character's current pose/silhouette, and the environment. "
        "Identify the exact emotional state of the character in the frame."
    )

    # ==========================================================================
    # CHARACTER IDENTIFICATION
    # ==========================================================================

    CHARACTER_IDENTIFICATION = """[CROSS-REFERENCE REQUEST]

CONTEXT:
SCENE DIALOGUE/ACTION: "{scene_text}"
VISUAL DATA FROM ROUGH FRAME: "{visual_analysis}"

MASTER BIBLE:
{bible_excerpt}

OUTPUT JSON ONLY:
{{
  "characterName": "Who is the primary subject currently on screen?",
  "avatarFilename": "Which filename from the Bible represents this person?",
  "otherCharacters": ["Who else is in the scene contextually?"],
  "reasoning": "Brief technical justification."
}}"""

    # ==========================================================================
    # PROMPT SYNTHESIS
    # ==========================================================================

    PROMPT_SYNTHESIS = """[CINEMATIC RECONSTRUCTION INSTRUCTION]

STORY ENGINE DATA:
- PLOT PROGRESSION: {story_map}
- CURRENT ACTION/DIALOGUE: {scene_text}
- FULL CONTEXT: {script_context}

VISUAL PARAMETERS:
- TARGET IDENTITY: {character_name} (Reference Bible traits: {bible_excerpt})
- OTHER CHARACTERS IN SCENE: {other_characters}
- ORIGINAL FRAME COMPOSITION: {visual_analysis}
- REQUIRED STYLE: {style}

TASK: Write a prompt for a high-end image diffusion model.
1. EMOTION INFERENCE: Determine the EXACT micro-expression required (e.g., "twitching eye in repressed rage", "a cold, calculating smirk").
2. DESTRUCTIVE REPLACEMENT: Instruct the model to RECODE the face. Specify the skin texture, the light hitting the specific bone structure of {character_name}.
3. CINEMATOGRAPHY: Force specific lens traits (e.g. "Anamorphic bokeh, subtle halation, 35mm celluloid grit").
4. TONALITY: Match the 'action, tone, and emotion' of the script.

Output ONLY the final prompt. No conversation."""

    # ==========================================================================
    # IMAGE GENERATION
    # ==========================================================================

    IDENTITY_PROMPT = "[PROMPT] {prompt}"

    IDENTITY_TRANSPLANT = (
        "\n\n[INSTRUCTION] This is an IDENTITY TRANSPLANT. Use the AVATAR image as the *only* "
        "source for the person's identity. Use the SCENE image for pose, lighting, and "
        "composition. Replace the person in the SCENE with the person from the AVATAR."
    )

    AVATAR_LABEL = "\n\nAVATAR (Identity Source):"

    SCENE_LABEL = "\n\nSCENE (Composition Source):"

    CINEMATIC_RERENDER = """TASK: CINEMATIC RE-RENDER.
   - Enhance the following image based on this style: {prompt}
   - OUTPUT: A single, high-fidelity, color film frame."""

    @classmethod
    def get(cls, name: str) -> AgentPrompt:
        """Look up a template by attribute name."""
        template = getattr(cls, name.upper(), None)
        if not isinstance(template, str):
            raise KeyError(f"Unknown prompt: {name}")
        return AgentPrompt(name=name.lower(), template=template)

    @classmethod
    def render(cls, name: str, **variables) -> str:
        """Render a template with variables."""
        try:
            return cls.get(name).template.format(**variables)
        except KeyError as e:
            raise ValueError(f"Missing template variable for {name}: {e}")
