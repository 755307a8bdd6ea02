"""
Prompt templates for the two generation stages.

Both builders are pure functions of their arguments.
"""

SCENARIO_PREFIX = "Validar "
PRIORITY_LABELS = ("Alta", "Media", "Baja")


def build_technique_guidance(language: str = "español") -> str:
    """
    Persona and test-technique selection directive for the primary prompt.

    Asks the model to pick techniques by test type and to name the applied
    technique inside the "feature" field. Adds no new output fields.
    """
    return f"""Actúa como un analista de QA senior experto en diseño de pruebas de software.
Selecciona las técnicas de prueba más adecuadas según el tipo de prueba:
- Pruebas funcionales: Equivalence Partitioning, Boundary Value Analysis, Decision Table Testing, State Transition Testing, Use Case Testing.
- Pruebas de seguridad: Input Validation Testing, Authentication Testing, Authorization Testing, Session Management Testing.
- Pruebas de rendimiento: Load Testing, Stress Testing, Spike Testing, Endurance Testing.
- Pruebas no funcionales: Usability Testing, Compatibility Testing, Accessibility Testing, Recovery Testing.
- Pruebas estructurales: Statement Coverage, Branch Coverage, Path Testing, Condition Coverage.
Indica la técnica aplicada dentro del valor de "feature", con el formato "<Característica> (<Técnica>)".
Responde en {language}, salvo los términos técnicos y los nombres de las técnicas, que pueden ir en inglés.
"""


def build_primary_prompt(
    description: str,
    context_note: str,
    ticket_id: str,
    technique_guidance: bool = True,
    language: str = "español",
) -> str:
    """
    Build the stage 1 prompt: scenarios, impacts and regression suggestions.

    Args:
        description: Story or epic description
        context_note: Additional context derived from the reference link
        ticket_id: Identifier every scenario must carry in "jiraId"
        technique_guidance: Include the persona / technique directive
        language: Natural language of the answer

    Returns:
        Prompt text
    """
    guidance = build_technique_guidance(language) + "\n" if technique_guidance else ""
    priorities = ", ".join(f'"{p}"' for p in PRIORITY_LABELS)

    return f"""{guidance}Analiza la siguiente descripción de una historia de usuario o épica de Jira y el contexto adicional. Genera:
1. Una lista de casos de prueba detallados en lenguaje Gherkin. Para cada caso de prueba, incluye la propiedad "jiraId" con el ID de Jira "{ticket_id}". El valor de la propiedad "scenario" debe comenzar con la palabra "{SCENARIO_PREFIX}". Asigna a cada caso una propiedad "priority" con uno de los valores {priorities}.
2. Una lista de posibles impactos del cambio.
3. Una lista de pruebas de regresión necesarias.

La respuesta debe ser un objeto JSON con las siguientes propiedades: "testCases" (un arreglo de objetos Gherkin), "impacts" (una cadena de texto con saltos de línea para cada impacto), y "regressionTests" (una cadena de texto con saltos de línea para cada prueba de regresión).
Cada objeto de caso de prueba en "testCases" debe tener las propiedades, en este orden: "jiraId", "feature", "scenario", "given", "when", "then" y "priority".
Usa saltos de línea dentro de "given", "when" y "then" para separar pasos encadenados con "Y".

Descripción de Jira:
"{description}"

Contexto Adicional (del enlace de Jira):
"{context_note}"

Ejemplo de formato JSON deseado:
{{
  "testCases": [
    {{
      "jiraId": "{ticket_id}",
      "feature": "Gestión de Usuarios (Use Case Testing)",
      "scenario": "{SCENARIO_PREFIX}Inicio de sesión exitoso",
      "given": "Estoy en la página de inicio de sesión\\nY tengo credenciales válidas",
      "when": "Ingreso mis credenciales\\nY hago clic en el botón 'Iniciar Sesión'",
      "then": "Debería ser redirigido al panel de control\\nY mi nombre de usuario debería mostrarse en la esquina superior",
      "priority": "Alta"
    }}
  ],
  "impacts": "Posible impacto 1\\nPosible impacto 2",
  "regressionTests": "Prueba regresiva crítica 1\\nPrueba regresiva de interfaz 2"
}}

---

Genera el análisis completo en JSON ahora:"""


def build_regression_conversion_prompt(regression_text: str, ticket_id: str) -> str:
    """
    Build the stage 2 prompt: turn free-text regression suggestions into
    scenario objects tagged with ticket_id.
    """
    priorities = ", ".join(f'"{p}"' for p in PRIORITY_LABELS)

    return f"""Convierte las siguientes sugerencias de pruebas de regresión en casos de prueba detallados en lenguaje Gherkin.
Genera un caso de prueba por cada sugerencia. Para cada caso de prueba, incluye la propiedad "jiraId" con el ID de Jira "{ticket_id}". El valor de la propiedad "scenario" debe comenzar con la palabra "{SCENARIO_PREFIX}". Asigna a cada caso una propiedad "priority" con uno de los valores {priorities}, según el riesgo de regresión.

La respuesta debe ser un arreglo JSON de objetos con las propiedades, en este orden: "jiraId", "feature", "scenario", "given", "when", "then" y "priority".

Sugerencias de pruebas de regresión:
"{regression_text}"

Ejemplo de formato JSON deseado:
[
  {{
    "jiraId": "{ticket_id}",
    "feature": "Regresión de Autenticación",
    "scenario": "{SCENARIO_PREFIX}que el cierre de sesión sigue funcionando",
    "given": "Tengo una sesión iniciada",
    "when": "Hago clic en 'Cerrar Sesión'",
    "then": "Debería volver a la página de inicio de sesión",
    "priority": "Media"
  }}
]

---

Genera el arreglo JSON ahora:"""
