"""Code review prompt template"""

from capserve.cap.template import PromptTemplate
from capserve.schema.descriptor import SchemaDescriptor, string_field


CODE_REVIEW_SCHEMA = SchemaDescriptor.of(
    string_field("code", "Code block to review"),
    string_field(
        "language", "Programming language of the code (e.g. typescript, javascript, python, java)",
        required=False, default="typescript",
    ),
    string_field(
        "focusAreas",
        "Areas to emphasise during review (e.g. security, performance, readability, tests). "
        "Separate multiple areas with commas",
        required=False,
    ),
)

CODE_REVIEW_BODY = """Please review the following code, paying particular attention to:

1. **Code quality and readability**
   - Are variable and function names clear?
   - Is the structure logical and easy to follow?
   - Are comments used appropriately?

2. **Performance**
   - Is there unnecessary work or duplicated code?
   - Is the algorithmic complexity appropriate?
   - Is memory used efficiently?

3. **Security and error handling**
   - Is input validated properly?
   - Are exceptions handled correctly?
   - Are there security vulnerabilities?

4. **Best practices**
   - Does the code follow the idioms of its language and framework?
   - Does it follow the style guide?

5. **Suggested improvements**
   - Are there parts that should be refactored?
   - Are there better alternatives?

Code:
```{language}
{code}
```

Please begin the review."""

FOCUS_HEADING = "Areas to focus on:"

CODE_REVIEW_TEMPLATE = PromptTemplate(CODE_REVIEW_BODY, list_fields={"focusAreas": FOCUS_HEADING})
