"""Reading passage shown to the patient while recording."""

READING_PASSAGE = (
    "The sun rises over the peaceful mountains, painting the sky with shades of "
    "orange and pink. Birds begin their morning songs while dew glistens on the "
    "grass. In the distance, a gentle stream flows through the valley, carrying "
    "memories of yesterday and promises of tomorrow. Life moves forward with each "
    "passing moment, bringing new opportunities and challenges. We navigate through "
    "our days with hope and determination, finding strength in the connections we "
    "share with others. Time teaches us valuable lessons about patience, resilience, "
    "and the importance of cherishing each experience."
)

RECORDING_TIPS = (
    "Find a quiet environment",
    "Speak at your normal pace",
    "Hold the microphone 6-8 inches from your mouth",
    "Read the entire passage naturally",
)


def format_elapsed(seconds: int) -> str:
    """Format seconds as MM:SS."""
    mins, secs = divmod(max(seconds, 0), 60)
    return f"{mins:02d}:{secs:02d}"
