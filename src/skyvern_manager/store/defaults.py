"""Default configuration documents, seeded on first read."""

from __future__ import annotations

DEFAULT_FILTER_CONFIG: dict = {"status": "published"}

DEFAULT_FIELD_CONFIG: dict = {
    "fields": [
        "workflow_permanent_id",
        "title",
        "description",
        "workflow_definition.parameters.key",
        "workflow_definition.parameters.description",
        "workflow_definition.parameters.workflow_parameter_type",
        "webhook_callback_url",
    ],
    "filters": [
        {
            "field": "workflow_definition.parameters.parameter_type",
            "operator": "eq",
            "value": "workflow",
        }
    ],
}

DEFAULT_WORKFLOW_FILTER: dict = {}

DEFAULT_TEMPLATE = """<div class="workflow-entry">
  <div class="workflow-header">
    <h2 class="workflow-title">{title}</h2>
    <div class="workflow-id">{workflow_permanent_id}</div>
  </div>

  <div class="workflow-description">{description}</div>

  <table class="params-table">
    <thead>
      <tr>
        <th>Parameter</th>
        <th>Type</th>
        <th>Description</th>
      </tr>
    </thead>
    <tbody>{{#each workflow_definition.parameters}}
      <tr>
        <td class="param-key">{key}</td>
        <td class="param-type">{workflow_parameter_type}</td>
        <td class="param-description">{description}</td>
      </tr>{{/each}}
    </tbody>
  </table>

  <div class="workflow-webhook">
    <span class="label">Webhook:</span>
    <span class="value">{webhook_callback_url}</span>
  </div>
</div>
<hr class="workflow-divider" />"""
