"""
HireBridge - Static Question Bank.

Role-specific fallback questions tagged with difficulty, topic and type.
Every role must cover all three difficulty tiers, and question text must be
unique within a role: the selector de-duplicates on exact text.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from hirebridge.core.domain.models import Difficulty, Question, QuestionType, Role
from hirebridge.core.exceptions import ConfigurationError, EmptyBankError


E, M, H = Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD
CONCEPTUAL = QuestionType.CONCEPTUAL
CODING = QuestionType.CODING
DEBUGGING = QuestionType.DEBUGGING


# -----------------------------------------------------------------------------
# Software Developer
# -----------------------------------------------------------------------------

_SOFTWARE_DEVELOPER = (
    Question(E, "fundamentals", CONCEPTUAL,
             "In your own words, what is the difference between a function and a class in a language you use often?"),
    Question(E, "frontend", CONCEPTUAL,
             "Describe how the browser handles an HTTP GET request from typing a URL to rendering the page."),
    Question(E, "basics", CONCEPTUAL,
             "Can you explain what version control is and why it's important in software development?"),
    Question(E, "debugging", DEBUGGING,
             "Look at this code snippet. Can you identify what's wrong and explain how you would fix it?",
             """function calculateTotal(items) {
  let total = 0;
  for (let i = 0; i <= items.length; i++) {
    total += items[i].price;
  }
  return total;
}
// Bug: Array index out of bounds"""),
    Question(M, "backend", CONCEPTUAL,
             "How would you design a simple authentication flow for a web app using an API and a database?"),
    Question(M, "dsa", CONCEPTUAL,
             "Explain when you would use a hash map versus an array, and why."),
    Question(M, "performance", DEBUGGING,
             "This React component is causing performance issues. What's the problem and how would you optimize it?",
             """function UserList({ users }) {
  return (
    <div>
      {users.map((user) => {
        const processedData = expensiveOperation(user);
        return <UserCard key={user.id} data={processedData} />;
      })}
    </div>
  );
}
// Issue: Expensive operation runs on every render"""),
    Question(M, "api", CONCEPTUAL,
             "Describe how you would design a RESTful API for a blog platform. What endpoints would you create?"),
    Question(M, "coding", CODING,
             "Write a function that removes duplicate values from an array while preserving the original order. Explain your approach.",
             """function removeDuplicates(arr) {
  // Your implementation here

}

// Example: [1, 2, 2, 3, 4, 3, 5] -> [1, 2, 3, 4, 5]"""),
    Question(H, "system_design", CONCEPTUAL,
             "How would you design a scalable API for a code-submission platform that must handle concurrent requests and background processing?"),
    Question(H, "architecture", CONCEPTUAL,
             "Explain the trade-offs between microservices and monolithic architecture. When would you choose one over the other?"),
    Question(H, "debugging_advanced", DEBUGGING,
             "This async code has a subtle race condition. Can you identify it and propose a solution?",
             """async function processOrders(orderIds) {
  let totalRevenue = 0;

  orderIds.forEach(async (id) => {
    const order = await fetchOrder(id);
    totalRevenue += order.amount;
  });

  return totalRevenue;
}
// Bug: totalRevenue returns before async operations complete"""),
)


# -----------------------------------------------------------------------------
# Data Analyst
# -----------------------------------------------------------------------------

_DATA_ANALYST = (
    Question(E, "sql", CODING,
             "Write a SQL query to count the number of users who signed up in the last 7 days.",
             """SELECT -- Your query here
FROM users
WHERE -- Filter condition

-- Table: users (id, name, signup_date)"""),
    Question(E, "cleaning", CONCEPTUAL,
             "Describe your approach when you find many missing values in a numeric column."),
    Question(E, "basics", CONCEPTUAL,
             "What is the difference between mean, median, and mode? When would you use each?"),
    Question(E, "tools", CONCEPTUAL,
             "What data analysis tools or software are you most comfortable with, and why?"),
    Question(M, "pandas", CODING,
             "Using Pandas, write code to group sales data by region and compute total revenue per region.",
             """import pandas as pd

# df has columns: region, product, revenue
df = pd.DataFrame(...)

# Your code here
result = """),
    Question(M, "viz", CONCEPTUAL,
             "Which visualization would you use to compare the distribution of two numeric variables, and why?"),
    Question(M, "analysis", CONCEPTUAL,
             "How would you approach analyzing customer churn data to identify key patterns?"),
    Question(M, "joins", CONCEPTUAL,
             "Explain the difference between INNER JOIN, LEFT JOIN, and RIGHT JOIN with a practical example."),
    Question(H, "insights", CONCEPTUAL,
             "You see a sudden spike in churn rate in your dashboard. Walk me through how you would investigate and validate the cause."),
    Question(H, "prediction", CONCEPTUAL,
             "How would you build a predictive model to forecast next quarter's sales based on historical data?"),
    Question(H, "debugging_sql", DEBUGGING,
             "This SQL query is supposed to find top customers but returns incorrect results. What's wrong?",
             """SELECT customer_id, SUM(order_total)
FROM orders
WHERE order_date > '2024-01-01'
ORDER BY SUM(order_total) DESC
LIMIT 10;

-- Error: Column 'customer_id' must appear in GROUP BY"""),
)


# -----------------------------------------------------------------------------
# AI / ML Engineer
# -----------------------------------------------------------------------------

_AI_ML_ENGINEER = (
    Question(E, "basics", CONCEPTUAL,
             "What is the difference between supervised and unsupervised learning? Give one example of each."),
    Question(E, "overfitting", CONCEPTUAL,
             "How would you explain overfitting to a non-technical stakeholder?"),
    Question(E, "algorithms", CONCEPTUAL,
             "Can you explain the difference between classification and regression problems?"),
    Question(E, "preprocessing", CODING,
             "Write code to normalize a dataset using min-max scaling. Explain why this is important.",
             """import numpy as np

def normalize_data(data):
    # Your implementation here
    # Apply min-max scaling: (x - min) / (max - min)
    pass

# Example: [1, 2, 3, 4, 5] -> [0, 0.25, 0.5, 0.75, 1.0]"""),
    Question(M, "evaluation", CONCEPTUAL,
             "For an imbalanced binary classification problem, which metrics would you focus on and why?"),
    Question(M, "training", CONCEPTUAL,
             "Describe the steps you follow to take a raw dataset to a trained model ready for evaluation."),
    Question(M, "features", CONCEPTUAL,
             "What is feature engineering and why is it important? Give an example from your experience."),
    Question(M, "model_debug", DEBUGGING,
             "This model training code has an issue causing poor performance. What's the problem?",
             """from sklearn.model_selection import train_test_split
from sklearn.preprocessing import StandardScaler

X_train, X_test, y_train, y_test = train_test_split(X, y)

scaler = StandardScaler()
X_train_scaled = scaler.fit_transform(X_train)
X_test_scaled = scaler.fit_transform(X_test)

model.fit(X_train_scaled, y_train)

# Bug: Test data scaling is wrong"""),
    Question(H, "deployment", CONCEPTUAL,
             "How would you design a pipeline to deploy, monitor, and periodically retrain a production ML model?"),
    Question(H, "optimization", CONCEPTUAL,
             "Explain how you would optimize a deep learning model that's too slow for production use."),
    Question(H, "ethics", CONCEPTUAL,
             "How would you detect and mitigate bias in a machine learning model used for loan approvals?"),
)


# -----------------------------------------------------------------------------
# HR / Management
# -----------------------------------------------------------------------------

_HR_MANAGEMENT = (
    Question(E, "communication", CONCEPTUAL,
             "Tell me about a time you had to explain a difficult message to a team member. How did you approach it?"),
    Question(E, "teamwork", CONCEPTUAL,
             "How do you build trust with a new team you are leading?"),
    Question(E, "motivation", CONCEPTUAL,
             "What strategies do you use to keep your team motivated during challenging projects?"),
    Question(E, "feedback", CONCEPTUAL,
             "How do you approach giving constructive feedback to underperforming team members?"),
    Question(M, "conflict", CONCEPTUAL,
             "Describe a situation where two key team members disagreed strongly. How would you handle it as their manager?"),
    Question(M, "leadership", CONCEPTUAL,
             "How do you balance delivering results with supporting your team's well-being?"),
    Question(M, "delegation", CONCEPTUAL,
             "How do you decide which tasks to delegate and which to handle yourself?"),
    Question(M, "performance", CONCEPTUAL,
             "What's your approach to setting clear performance expectations for your team?"),
    Question(H, "strategy", CONCEPTUAL,
             "You have to lead a major change initiative with tight deadlines and some resistance. How would you plan and execute it?"),
    Question(H, "culture", CONCEPTUAL,
             "How would you transform a team with low morale and poor collaboration into a high-performing unit?"),
    Question(H, "crisis", CONCEPTUAL,
             "Describe how you would handle a situation where a critical project is failing and stakeholders are losing confidence."),
)


QUESTION_BANK: dict[Role, tuple[Question, ...]] = {
    Role.SOFTWARE_DEVELOPER: _SOFTWARE_DEVELOPER,
    Role.DATA_ANALYST: _DATA_ANALYST,
    Role.AI_ML_ENGINEER: _AI_ML_ENGINEER,
    Role.HR_MANAGEMENT: _HR_MANAGEMENT,
}

ALLOWED_ROLES: tuple[str, ...] = tuple(role.value for role in Role)


def get_questions(
    role: Role | str,
    bank: Mapping[Role, Sequence[Question]] | None = None,
) -> Sequence[Question]:
    """
    Resolve the question set for a role.

    Raises:
        UnsupportedRoleError: role is not a supported interview track
        EmptyBankError: the role has no questions configured
    """
    resolved = Role.parse(role)
    questions = (QUESTION_BANK if bank is None else bank).get(resolved) or ()
    if not questions:
        raise EmptyBankError(resolved.value)
    return questions


def validate_bank(bank: Mapping[Role, Sequence[Question]]) -> None:
    """Check per-role difficulty coverage and text uniqueness."""
    for role, questions in bank.items():
        tiers = {q.difficulty for q in questions}
        missing = [d.value for d in Difficulty if d not in tiers]
        if missing:
            raise ConfigurationError(
                f"Question bank for {role.value} is missing difficulty tiers",
                details=", ".join(missing),
            )

        texts = [q.text for q in questions]
        if len(texts) != len(set(texts)):
            raise ConfigurationError(
                f"Question bank for {role.value} has duplicate question text",
            )


validate_bank(QUESTION_BANK)
