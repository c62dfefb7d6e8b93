"""
Coefficient tables and thresholds shared by cycle and nutrition services.
"""
from typing import Dict, List
from cyclefuel.models.cycle import CyclePhase
from cyclefuel.models.user import ActivityLevel

ACTIVITY_MULTIPLIERS: Dict[str, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
    ActivityLevel.EXTREMELY_ACTIVE: 1.9,
}
DEFAULT_ACTIVITY_LEVEL = ActivityLevel.MODERATELY_ACTIVE

# kcal per kg of body weight before activity and phase adjustments
BASE_CALORIES_PER_KG = 24

PHASE_CALORIE_MULTIPLIERS: Dict[CyclePhase, float] = {
    CyclePhase.MENSTRUAL: 1.0,
    CyclePhase.FOLLICULAR: 0.98,
    CyclePhase.OVULATION: 1.02,
    CyclePhase.EARLY_LUTEAL: 1.05,
    CyclePhase.LATE_LUTEAL: 1.08,
}

# grams per kg of body weight: (protein, carbs, fat)
PHASE_MACRO_RATIOS: Dict[CyclePhase, Dict[str, float]] = {
    CyclePhase.MENSTRUAL: {"protein": 1.2, "carbs": 4.0, "fat": 0.8},
    CyclePhase.FOLLICULAR: {"protein": 1.0, "carbs": 5.0, "fat": 0.7},
    CyclePhase.OVULATION: {"protein": 1.1, "carbs": 4.5, "fat": 0.8},
    CyclePhase.EARLY_LUTEAL: {"protein": 1.3, "carbs": 3.5, "fat": 1.0},
    CyclePhase.LATE_LUTEAL: {"protein": 1.4, "carbs": 3.0, "fat": 1.2},
}

PHASE_NUTRIENT_MULTIPLIERS: Dict[CyclePhase, Dict[str, float]] = {
    CyclePhase.MENSTRUAL: {"iron": 1.5, "vitamin_c": 1.2, "magnesium": 1.1},
    CyclePhase.FOLLICULAR: {"iron": 1.0, "vitamin_c": 1.0, "magnesium": 1.0},
    CyclePhase.OVULATION: {"iron": 1.0, "vitamin_c": 1.0, "magnesium": 1.0},
    CyclePhase.EARLY_LUTEAL: {"iron": 1.1, "vitamin_c": 1.0, "magnesium": 1.2},
    CyclePhase.LATE_LUTEAL: {
        "iron": 1.2,
        "vitamin_c": 1.1,
        "magnesium": 1.3,
        "calcium": 1.2,
        "vitamin_b6": 1.3,
    },
}

MICRONUTRIENT_BASELINES: Dict[str, float] = {
    "iron": 15,
    "magnesium": 320,
    "vitamin_c": 75,
}
FIBER_PER_KG = 0.4
CALCIUM_TARGET = 1000
VITAMIN_D_TARGET = 2000

DEFICIENCY_WARNING_RATIO = 0.7
SEVERE_DEFICIENCY_RATIO = 0.5
MILD_DEFICIENCY_RATIO = 0.9
EXCESS_RATIO = 1.5
HIGH_ACTIVITY_THRESHOLD = 0.75
HEALTH_CONDITION_THRESHOLD = 0.8
SENIOR_AGE = 50

MIN_ACCEPTANCE_RATE = 0.3
DEFAULT_IRON_TARGET = 18

NORMAL_CYCLE_RANGE = (21, 35)
NORMAL_PERIOD_RANGE = (3, 7)
LUTEAL_LENGTH = 14
OVULATION_WINDOW = 2

PHASE_ADVICE: Dict[CyclePhase, str] = {
    CyclePhase.MENSTRUAL: (
        "Day {day} of your period. Focus on iron-rich foods and rest. "
        "Your body needs extra nutrients to recover."
    ),
    CyclePhase.FOLLICULAR: (
        "Day {day} - Follicular phase. Your energy is rising! "
        "Great time for high-intensity workouts and complex carbs."
    ),
    CyclePhase.OVULATION: (
        "Day {day} - Peak fertility. You're at your strongest! "
        "Optimal time for challenging activities and social engagement."
    ),
    CyclePhase.EARLY_LUTEAL: (
        "Day {day} - Early luteal phase. Metabolism is increasing. "
        "Add more protein and healthy fats to your meals."
    ),
    CyclePhase.LATE_LUTEAL: (
        "Day {day} - Late luteal phase. PMS symptoms may appear. "
        "Prioritize magnesium, reduce processed carbs, and practice self-care."
    ),
}

EXPECTED_SYMPTOMS: Dict[CyclePhase, List[str]] = {
    CyclePhase.MENSTRUAL: ["Cramps", "Fatigue", "Lower back pain", "Headaches"],
    CyclePhase.FOLLICULAR: ["Increased energy", "Improved mood", "Better skin"],
    CyclePhase.OVULATION: ["Peak energy", "Increased libido", "Mild bloating"],
    CyclePhase.EARLY_LUTEAL: ["Stable energy", "Good focus"],
    CyclePhase.LATE_LUTEAL: [
        "Fatigue", "Bloating", "Mood swings", "Food cravings", "Breast tenderness"
    ],
}

PHASE_GUIDANCE: Dict[CyclePhase, str] = {
    CyclePhase.FOLLICULAR: (
        "During the follicular phase, your body is more insulin-sensitive "
        "and handles carbohydrates efficiently"
    ),
    CyclePhase.OVULATION: (
        "During ovulation, increased protein supports your body's peak performance window"
    ),
    CyclePhase.EARLY_LUTEAL: (
        "During the luteal phase, higher protein and healthy fats help combat "
        "insulin resistance and support hormonal balance"
    ),
    CyclePhase.LATE_LUTEAL: (
        "During the luteal phase, higher protein and healthy fats help combat "
        "insulin resistance and support hormonal balance"
    ),
    CyclePhase.MENSTRUAL: (
        "During menstruation, prioritize protein and iron-rich foods to support recovery"
    ),
}

STREAK_MILESTONES = [3, 7, 14, 30, 60, 90, 180, 365]
FIRST_LOG_XP = 10
LOG_XP = 5
GOAL_REACHED_XP = 50
XP_PER_LEVEL = 100
