# 7. dash_app.py
import base64
import io
import logging
import os

import dash
import numpy as np
import pandas as pd
import plotly.express as px
from dash import Dash, Input, Output, State, dash_table, dcc, html

from app import cluster_customers
from config import (ClusterConfig, HCLUST_COLUMN, KMEANS_COLUMN, ORDINAL_LEVELS, SCATTER_AXES)
from errors import SegmentationError
from load_data import validate_schema
from preprocess import clean_customers, encode_ordinal

logger = logging.getLogger(__name__)

app = Dash(__name__, external_stylesheets=["https://cdn.jsdelivr.net/npm/bootstrap@5.1.3/dist/css/bootstrap.min.css"])
app.title = 'Credit Card Customer Segmentation'

server = app.server

# Global state
store = {
    "result": None,
    "config": ClusterConfig(),
}


def process_upload(df, config=None):
    """Validate, clean and cluster an uploaded customer table."""
    validate_schema(df)
    return cluster_customers(clean_customers(df), config or store["config"])


def get_chart_figure(result, chart_type):
    if result is None:
        return {}
    df = result.data
    x, y = SCATTER_AXES

    if chart_type == 'elbow':
        return px.line(result.wss, x='k', y='wss', markers=True, title='Elbow Method (Total WSS per k)')
    elif chart_type == 'silhouette':
        return px.line(result.silhouette, x='k', y='silhouette', markers=True,
                       title=f'Silhouette Method (best k={result.recommended_k})')
    elif chart_type == 'scatter':
        return px.scatter(df, x=x, y=y, color=df[KMEANS_COLUMN].astype(str),
                          labels={'color': 'Cluster'}, title='K-Means Customer Segments')
    elif chart_type == 'comparison':
        return px.scatter(df, x=x, y=y, color=df[KMEANS_COLUMN].astype(str),
                          symbol=df[HCLUST_COLUMN].astype(str),
                          labels={'color': 'K-Means', 'symbol': 'Hierarchical'},
                          title='K-Means (colour) vs Hierarchical (symbol)')
    elif chart_type == 'sizes':
        counts = df[KMEANS_COLUMN].value_counts().sort_index().reset_index()
        counts.columns = ['Cluster', 'Customers']
        counts['Cluster'] = counts['Cluster'].astype(str)
        return px.bar(counts, x='Cluster', y='Customers', title='Customers per K-Means Cluster')
    return {}


def crosstab_records(result):
    table = result.crosstab.copy()
    table.columns = [str(c) for c in table.columns]
    table = table.reset_index().rename(columns={KMEANS_COLUMN: 'K-Means \\ Hierarchical'})
    columns = [{'name': str(c), 'id': str(c)} for c in table.columns]
    return table.to_dict('records'), columns


app.layout = html.Div([
    dcc.Download(id="download-table"),

    html.Div([
        html.H1("Credit Card Customer Segmentation", className="text-center text-primary mb-4"),

        html.Div([
            html.H3("1. Upload Customer CSV", className="text-secondary"),
            dcc.Upload(
                id='upload-data',
                children=html.Div(['Drag and Drop or ', html.A('Select File')]),
                style={
                    'width': '100%', 'height': '60px', 'lineHeight': '60px',
                    'borderWidth': '2px', 'borderStyle': 'dashed', 'borderRadius': '10px',
                    'textAlign': 'center', 'marginBottom': '20px'
                },
                multiple=False
            ),
            html.Div(id='file-upload-output', className="mb-4"),
        ]),

        html.H3("2. Cluster Visualizations", className="text-secondary"),
        dcc.Tabs(id='charts-tabs', value='elbow', children=[
            dcc.Tab(label='Elbow Curve', value='elbow'),
            dcc.Tab(label='Silhouette Curve', value='silhouette'),
            dcc.Tab(label='K-Means Scatter', value='scatter'),
            dcc.Tab(label='K-Means vs Hierarchical', value='comparison'),
            dcc.Tab(label='Cluster Sizes', value='sizes'),
        ]),
        html.Div([
            dcc.Graph(id='cluster-plot'),
            html.Button('Download Clustered Table', id='download-table-btn', className="btn btn-outline-success mt-2"),
        ]),

        html.H3("3. K-Means vs Hierarchical Cross-Tabulation", className="text-secondary mt-4"),
        html.P("Cluster ids are not aligned between methods; read matches off the table.", className="fst-italic"),
        dash_table.DataTable(id='crosstab', style_table={'overflowX': 'auto'}),

        html.Br(),
        html.Div(id='model-metrics', className="text-muted"),

        html.H3("4. Predict Customer Segment", className="text-secondary mt-5"),
        html.Div([
            dcc.Dropdown(id='income-input', options=ORDINAL_LEVELS['Income_Category'], placeholder='Income category'),
            dcc.Dropdown(id='education-input', options=ORDINAL_LEVELS['Education_Level'],
                         placeholder='Education level', className="mt-2"),
            dcc.Input(id='amount-input', type='number', placeholder='Total transaction amount', className="form-control mt-2"),
            dcc.Input(id='count-input', type='number', placeholder='Total transaction count', className="form-control mt-2"),
            html.Button('Predict Segment', id='predict-button', n_clicks=0, className="btn btn-primary mt-2"),
            html.Div(id='prediction-output', className="mt-2 text-success fw-bold")
        ], className="mb-5")
    ], className="container")
])


@app.callback(
    Output('file-upload-output', 'children'),
    Output('crosstab', 'data'),
    Output('crosstab', 'columns'),
    Output('model-metrics', 'children'),
    Input('upload-data', 'contents'),
    State('upload-data', 'filename')
)
def handle_upload(contents, filename):
    if contents is None:
        return "No file uploaded", [], [], ""

    _, content_string = contents.split(',')
    decoded = base64.b64decode(content_string)
    try:
        df = pd.read_csv(io.StringIO(decoded.decode('utf-8')))
        result = process_upload(df)
    except (SegmentationError, UnicodeDecodeError, pd.errors.ParserError) as e:
        logger.error(f"Upload of '{filename}' rejected: {e}")
        store['result'] = None
        return f"Could not process '{filename}': {e}", [], [], ""

    store['result'] = result
    data, columns = crosstab_records(result)
    metrics = (f"Final k: {store['config'].final_k} | Silhouette suggests k={result.recommended_k} | "
               f"K-Means WSS: {result.kmeans_fit.wss:.2f} | Hierarchical WSS: {result.hclust_fit.wss:.2f}")
    return f"Processed '{filename}'", data, columns, metrics


@app.callback(
    Output('cluster-plot', 'figure'),
    Input('charts-tabs', 'value'),
    Input('file-upload-output', 'children')
)
def update_chart(chart_type, _status):
    return get_chart_figure(store['result'], chart_type)


@app.callback(
    Output("download-table", "data"),
    Input("download-table-btn", "n_clicks"),
    prevent_initial_call=True
)
def trigger_csv_download(n_clicks):
    if store['result'] is not None:
        export = store['result'].data.drop(columns=[HCLUST_COLUMN])
        return dcc.send_data_frame(export.to_csv, "customers_clustered.csv", index=False)
    return dash.no_update


def predict_segment(result, income, education, amount, count):
    features = pd.DataFrame([{
        'Income_Category': encode_ordinal([income], ORDINAL_LEVELS['Income_Category'], 'Income_Category')[0],
        'Education_Level': encode_ordinal([education], ORDINAL_LEVELS['Education_Level'], 'Education_Level')[0],
        'Total_Trans_Amt': amount,
        'Total_Trans_Ct': count,
    }])[list(store['config'].features)]
    X = result.scaler.transform(features)
    return int(result.kmeans_fit.model.predict(np.asarray(X))[0]) + 1


@app.callback(
    Output('prediction-output', 'children'),
    Input('predict-button', 'n_clicks'),
    State('income-input', 'value'),
    State('education-input', 'value'),
    State('amount-input', 'value'),
    State('count-input', 'value')
)
def predict_cluster(n_clicks, income, education, amount, count):
    if n_clicks == 0 or None in (income, education, amount, count):
        return ""
    if store['result'] is None:
        return "Upload a customer file first."
    cluster = predict_segment(store['result'], income, education, amount, count)
    return f"Predicted Segment: Cluster {cluster}"


# Run Server: Render
if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8050))
    app.run(host="0.0.0.0", port=port, debug=False)
