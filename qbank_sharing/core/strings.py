STRINGS = {
    "core_question": {
        "questionbank_plural": "Question banks",
    },
    "mod_qbank": {
        "systembank": "System shared question bank",
        "systembankdescription": (
            "This question bank is created automatically by the system to hold questions "
            "that could not be placed in another bank."
        ),
        "previewbank": "Question preview bank",
        "defaultbankname": "{fullname} course question bank",
    },
    "mod_quiz": {
        "selectquestionbank": "Select question bank",
        "gobacktoquiz": "Go back",
        "searchbyname": "Search by name",
        "banksincourse": "Banks in this course",
        "recentlyviewedbanks": "Recently viewed banks",
        "otherbanks": "Shared banks in other courses",
        "switchbank": "Switch bank",
    },
}


def get_string(identifier: str, component: str, **params) -> str:
    text = STRINGS[component][identifier]
    return text.format(**params) if params else text
